"""Project history ledger: bounded list of projects a skill was applied on."""

from ...shared.base import utc_now
from ...shared.exceptions import NotFoundError, ValidationError
from ..entities.skill_record import ProjectExperience, ProjectFeedback, SkillRecord


class ProjectHistoryLedger:
    """Domain service for a skill record's project history."""

    def __init__(self, max_projects: int = 100) -> None:
        self.max_projects = max_projects

    def add(self, record: SkillRecord, project: ProjectExperience) -> ProjectExperience:
        """
        Append a project and roll up the experience counters.

        Raises:
            ValidationError: If the history is at capacity
        """
        if len(record.project_history) >= self.max_projects:
            raise ValidationError(
                "Maximum project history limit reached",
                details={"limit": self.max_projects},
            )

        record.project_history = [*record.project_history, project]

        experience = record.experience
        experience.total_projects = len(record.project_history)
        experience.total_hours = experience.total_hours + project.hours_logged
        if experience.first_used is None or project.start_date < experience.first_used:
            experience.first_used = project.start_date
        last_used = project.end_date or utc_now()
        if experience.last_used is None or last_used > experience.last_used:
            experience.last_used = last_used

        return project

    @staticmethod
    def update_feedback(
        record: SkillRecord, project_ref_or_id: str, feedback: ProjectFeedback
    ) -> ProjectExperience:
        project = record.find_project(project_ref_or_id)
        if project is None:
            raise NotFoundError(
                "Project not found in skill history",
                details={"project_id": project_ref_or_id},
            )
        project.feedback = feedback
        return project
