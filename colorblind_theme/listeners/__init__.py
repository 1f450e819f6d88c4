from .project_manager_listener import ColorblindProjectManagerListener

__all__ = ["ColorblindProjectManagerListener"]
