"""Application-scope and project-scope service registries."""

from .project_service_registry import ProjectServiceContainer, ProjectServiceRegistry, ServiceDescriptor
from .service_locator import ServiceLocator

__all__ = [
    "ProjectServiceContainer",
    "ProjectServiceRegistry",
    "ServiceDescriptor",
    "ServiceLocator",
]
