# colorblind_theme/core/project/project_manager.py
"""
Project lifecycle manager.

Opens and closes projects, owns the link between a project and its
service container, and publishes lifecycle events to subscribed listeners.
Listeners run synchronously on the caller's thread, in subscription order.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from ..dependency.project_service_registry import ProjectServiceRegistry
from ..error_handling import ErrorCategory, ErrorHandler, ErrorSeverity
from .project import Project

logger = logging.getLogger("ProjectManager")


class ProjectManagerListener:
    """
    Receives project lifecycle events. Override only what you need.
    """

    def project_opened(self, project: Project) -> None:
        pass

    def project_closing(self, project: Project) -> None:
        pass

    def project_closed(self, project: Project) -> None:
        pass


class Subscription:
    """Handle returned by ProjectManager.subscribe()."""

    def __init__(self, manager: "ProjectManager", listener: ProjectManagerListener):
        self._manager = manager
        self.listener = listener
        self.active = True

    def dispose(self) -> None:
        if self.active:
            self._manager.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class ProjectManager:
    """
    Host-side project lifecycle.

    open_project() creates the project's service container before any
    listener sees the project; close_project() disposes it between the
    closing and closed events.
    """

    def __init__(
        self,
        services: ProjectServiceRegistry,
        error_handler: Optional[ErrorHandler] = None,
        raise_listener_errors: bool = False,
    ):
        self._services = services
        self._error_handler = error_handler or ErrorHandler()
        self.raise_listener_errors = raise_listener_errors
        self._subscriptions: List[Subscription] = []
        self._projects: Dict[str, Project] = {}
        # ids of projects between their closing and closed events
        self._closing: Set[str] = set()
        self._lock = threading.RLock()

    def subscribe(self, listener: ProjectManagerListener) -> Subscription:
        subscription = Subscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug(f"Subscribed {type(listener).__name__}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        with self._lock:
            if subscription not in self._subscriptions:
                return False
            self._subscriptions.remove(subscription)
        subscription.active = False
        logger.debug(f"Unsubscribed {type(subscription.listener).__name__}")
        return True

    def listeners(self) -> List[ProjectManagerListener]:
        with self._lock:
            return [s.listener for s in self._subscriptions]

    def open_project(self, name: str, base_path: Optional[Union[str, Path]] = None) -> Project:
        """
        Open a project and notify listeners.

        Opening a base_path that is already open returns that project
        without firing any event.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Project name must be a non-empty string")

        resolved = Path(base_path).resolve() if base_path is not None else None
        with self._lock:
            if resolved is not None:
                for existing in self._projects.values():
                    if existing.base_path == resolved:
                        logger.info(f"Project at {resolved} is already open as '{existing.name}'")
                        return existing

            project = Project(name=name, base_path=resolved)
            project._attach(self._services.create_container(project))
            self._projects[project.project_id] = project

        logger.info(f"📂 Project opened: {project.name}")
        self._publish("project_opened", project)
        return project

    def close_project(self, project: Project) -> bool:
        """
        Close an open project. Returns False if it was not open or another
        caller is already closing it.
        """
        with self._lock:
            if self._projects.get(project.project_id) is not project:
                return False
            if project.project_id in self._closing:
                return False
            self._closing.add(project.project_id)

        try:
            self._publish("project_closing", project)

            with self._lock:
                self._projects.pop(project.project_id, None)
            self._services.dispose_container(project)
            project._dispose()
        finally:
            with self._lock:
                self._closing.discard(project.project_id)

        logger.info(f"📁 Project closed: {project.name}")
        self._publish("project_closed", project)
        return True

    def close_all(self) -> int:
        closed = 0
        for project in self.open_projects():
            if self.close_project(project):
                closed += 1
        return closed

    def open_projects(self) -> List[Project]:
        with self._lock:
            return list(self._projects.values())

    def find_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            return self._projects.get(project_id)

    def is_open(self, project: Project) -> bool:
        with self._lock:
            return self._projects.get(project.project_id) is project

    def shutdown(self) -> None:
        self.close_all()
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.dispose()

    def _publish(self, event: str, project: Project) -> None:
        """
        Deliver an event to every listener. A failing listener is reported
        and does not stop delivery to the rest.
        """
        first_failure: Optional[Exception] = None
        for listener in self.listeners():
            try:
                getattr(listener, event)(project)
            except Exception as e:
                self._error_handler.handle_error(
                    e,
                    component=type(listener).__name__,
                    operation=event,
                    severity=ErrorSeverity.HIGH,
                    category=ErrorCategory.LISTENER,
                    project=project.name,
                )
                if first_failure is None:
                    first_failure = e

        if first_failure is not None and self.raise_listener_errors:
            raise first_failure
