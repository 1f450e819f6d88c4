# colorblind_theme/core/project/project.py
"""Project handle shared between the host and plugins."""

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Type, TypeVar

from ..error_handling import ProjectDisposedError

if TYPE_CHECKING:
    from ..dependency.project_service_registry import ProjectServiceContainer

T = TypeVar("T")


@dataclass(eq=False)
class Project:
    """
    An open workspace.

    Plugins read `name` and request services; everything else is managed
    by the ProjectManager.
    """
    name: str
    base_path: Optional[Path] = None
    project_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _services: Optional["ProjectServiceContainer"] = field(default=None, repr=False)
    _disposed: bool = field(default=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self._services is not None and not self._disposed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def service(self, service_type: Type[T]) -> T:
        """Return this project's instance of a project service, creating it on first request."""
        if not self.is_open:
            raise ProjectDisposedError(f"Project '{self.name}' is not open")
        return self._services.resolve(service_type)

    def get_service_if_created(self, service_type: Type[T]) -> Optional[T]:
        if not self.is_open:
            return None
        return self._services.get_if_created(service_type)

    def _attach(self, container: "ProjectServiceContainer") -> None:
        self._services = container
        self._disposed = False

    def _dispose(self) -> None:
        self._disposed = True
        self._services = None
