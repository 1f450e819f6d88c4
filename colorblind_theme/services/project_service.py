import logging

from ..bundle import ThemeBundle
from ..core.project.project import Project

logger = logging.getLogger("ColorblindProjectService")


class ColorblindProjectService:
    """Per-project service; announces itself once when the project first asks for it."""

    def __init__(self, project: Project):
        logger.info(ThemeBundle.message("projectService", project.name))
