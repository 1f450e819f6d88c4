"""Projects and their lifecycle."""

from .project import Project
from .project_manager import ProjectManager, ProjectManagerListener, Subscription

__all__ = ["Project", "ProjectManager", "ProjectManagerListener", "Subscription"]
