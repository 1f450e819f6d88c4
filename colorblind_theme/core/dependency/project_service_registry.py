# colorblind_theme/core/dependency/project_service_registry.py
"""
Per-project service registry.

Plugins declare project-scope service types here. Every open project gets
its own ProjectServiceContainer, which creates each declared service lazily,
at most once, and disposes them when the project closes.
"""

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Type, TypeVar

from ..error_handling import (
    CyclicServiceError,
    ErrorCategory,
    ErrorHandler,
    ProjectDisposedError,
    ServiceNotRegisteredError,
)

if TYPE_CHECKING:
    from ..project.project import Project

T = TypeVar("T")

logger = logging.getLogger("ProjectServiceRegistry")


@dataclass(frozen=True)
class ServiceDescriptor:
    """Declaration of one project-scope service."""
    service_type: type
    factory: Callable[["Project"], Any]
    plugin_id: Optional[str] = None


def _type_name(service_type: Any) -> str:
    return getattr(service_type, "__qualname__", repr(service_type))


class ProjectServiceContainer:
    """
    Services of one open project.

    resolve() is the host's service-locator call: the first request for a
    type constructs it with the project as the only argument, later requests
    return the cached instance.
    """

    def __init__(self, project: "Project", registry: "ProjectServiceRegistry"):
        self.project = project
        self._registry = registry
        self._instances: Dict[type, Any] = {}
        self._creation_order: List[type] = []
        self._constructing: List[type] = []
        self._lock = threading.RLock()
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def resolve(self, service_type: Type[T]) -> T:
        """Return the project's instance of service_type, creating it on first use."""
        with self._lock:
            if self._disposed:
                raise ProjectDisposedError(
                    f"Project '{self.project.name}' is closed; cannot resolve {_type_name(service_type)}"
                )

            if service_type in self._instances:
                return self._instances[service_type]

            descriptor = self._registry.get_descriptor(service_type)
            if descriptor is None:
                raise ServiceNotRegisteredError(service_type)

            if service_type in self._constructing:
                chain = " -> ".join(_type_name(t) for t in self._constructing + [service_type])
                raise CyclicServiceError(f"Cyclic project service request: {chain}")

            self._constructing.append(service_type)
            try:
                instance = descriptor.factory(self.project)
            finally:
                self._constructing.pop()

            self._instances[service_type] = instance
            self._creation_order.append(service_type)
            logger.debug(f"Created {_type_name(service_type)} for project '{self.project.name}'")
            return instance

    def get_if_created(self, service_type: Type[T]) -> Optional[T]:
        with self._lock:
            return self._instances.get(service_type)

    def created_services(self) -> List[type]:
        with self._lock:
            return list(self._creation_order)

    def discard(self, service_type: type) -> None:
        """Dispose and forget a single created service (used when a plugin unloads)."""
        with self._lock:
            instance = self._instances.pop(service_type, None)
            if instance is None:
                return
            self._creation_order.remove(service_type)
        self._dispose_instance(service_type, instance)

    def dispose(self) -> None:
        """Dispose every created service, newest first. Safe to call twice."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            order = list(reversed(self._creation_order))
            instances = self._instances
            self._instances = {}
            self._creation_order = []

        for service_type in order:
            self._dispose_instance(service_type, instances[service_type])
        logger.debug(f"Disposed {len(order)} service(s) of project '{self.project.name}'")

    def _dispose_instance(self, service_type: type, instance: Any) -> None:
        hook = getattr(instance, "dispose", None)
        if not callable(hook):
            return
        try:
            hook()
        except Exception as e:
            self._registry.report_error(e, service_type, self.project)


class ProjectServiceRegistry:
    """
    Declarations of project-scope services plus the containers of open projects.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        self._descriptors: Dict[type, ServiceDescriptor] = {}
        self._containers: Dict[str, ProjectServiceContainer] = {}
        self._lock = threading.RLock()
        self._error_handler = error_handler or ErrorHandler()

    def register(
        self,
        service_type: type,
        factory: Optional[Callable[["Project"], Any]] = None,
        plugin_id: Optional[str] = None,
        override: bool = False,
    ) -> None:
        """
        Declare a project service.

        :param service_type: key used by resolve(); also the default factory
        :param factory: callable taking the project; defaults to service_type
        :param plugin_id: owning plugin, for bulk unregistration
        :param override: allow replacing an existing declaration
        """
        factory = factory or service_type
        if not callable(factory):
            raise ValueError(f"Factory for '{_type_name(service_type)}' must be callable")
        with self._lock:
            if service_type in self._descriptors and not override:
                raise ValueError(f"Project service '{_type_name(service_type)}' already registered")
            self._descriptors[service_type] = ServiceDescriptor(service_type, factory, plugin_id)
        logger.debug(f"Registered project service {_type_name(service_type)} (plugin={plugin_id})")

    def unregister(self, service_type: type) -> bool:
        """Remove a declaration and dispose its instances in every open project."""
        with self._lock:
            removed = self._descriptors.pop(service_type, None)
            containers = list(self._containers.values())
        if removed is None:
            return False
        for container in containers:
            container.discard(service_type)
        logger.debug(f"Unregistered project service {_type_name(service_type)}")
        return True

    def unregister_plugin(self, plugin_id: str) -> int:
        """Remove every declaration owned by plugin_id. Returns how many were removed."""
        with self._lock:
            owned = [t for t, d in self._descriptors.items() if d.plugin_id == plugin_id]
        for service_type in owned:
            self.unregister(service_type)
        return len(owned)

    def get_descriptor(self, service_type: type) -> Optional[ServiceDescriptor]:
        with self._lock:
            return self._descriptors.get(service_type)

    def is_registered(self, service_type: type) -> bool:
        return self.get_descriptor(service_type) is not None

    def registered_services(self) -> List[type]:
        with self._lock:
            return list(self._descriptors)

    def create_container(self, project: "Project") -> ProjectServiceContainer:
        with self._lock:
            if project.project_id in self._containers:
                raise ValueError(f"Project '{project.name}' already has a service container")
            container = ProjectServiceContainer(project, self)
            self._containers[project.project_id] = container
            return container

    def container_for(self, project: "Project") -> ProjectServiceContainer:
        with self._lock:
            container = self._containers.get(project.project_id)
        if container is None:
            raise ProjectDisposedError(f"Project '{project.name}' is not open")
        return container

    def dispose_container(self, project: "Project") -> bool:
        with self._lock:
            container = self._containers.pop(project.project_id, None)
        if container is None:
            return False
        container.dispose()
        return True

    def open_container_count(self) -> int:
        with self._lock:
            return len(self._containers)

    def report_error(self, exc: Exception, service_type: type, project: "Project") -> None:
        self._error_handler.handle_error(
            exc,
            component=_type_name(service_type),
            operation="dispose",
            category=ErrorCategory.SERVICE,
            project=project.name,
        )
