from .project_service import ColorblindProjectService

__all__ = ["ColorblindProjectService"]
