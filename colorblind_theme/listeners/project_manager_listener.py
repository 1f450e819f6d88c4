from ..core.project.project import Project
from ..core.project.project_manager import ProjectManagerListener
from ..services.project_service import ColorblindProjectService


class ColorblindProjectManagerListener(ProjectManagerListener):

    def project_opened(self, project: Project) -> None:
        project.service(ColorblindProjectService)
