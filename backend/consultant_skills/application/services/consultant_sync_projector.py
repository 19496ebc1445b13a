"""
Consultant skill projection.

Keeps the consultant's denormalized skill list in step with skill records.
Writes are idempotent, so a failed sync can simply be repeated.
"""

from ...core.observability import get_logger
from ...domain.skills.entities.skill_record import ConsultantSkillSummary
from ...domain.skills.repositories.consultant_repository import ConsultantRepository
from ...domain.skills.value_objects.enums import SyncAction

logger = get_logger(__name__)


class ConsultantSyncProjector:
    """Propagates skill summaries into the owning consultant's skill list."""

    def __init__(self, consultants: ConsultantRepository):
        self.consultants = consultants

    async def project(
        self,
        consultant_id: str,
        action: SyncAction,
        skill_id: str,
        summary: ConsultantSkillSummary | None = None,
    ) -> bool:
        """
        Apply one projection action.

        Args:
            consultant_id: Owner of the skill list
            action: add (push, replacing an entry with the same skill id),
                update (set the matching entry) or remove (pull by skill id)
            skill_id: Skill record id keying the entry
            summary: Summary to write; required for add and update

        Returns:
            True if the skill list changed

        Raises:
            RepositoryError: If the consultant store fails
        """
        if action == SyncAction.REMOVE:
            changed = await self.consultants.pull_skill(consultant_id, skill_id)
        else:
            if summary is None:
                raise ValueError(f"Projection action {action.value} requires a summary")
            if action == SyncAction.ADD:
                changed = await self.consultants.push_skill(consultant_id, summary)
            else:
                changed = await self.consultants.set_skill(consultant_id, summary)

        if not changed:
            logger.debug(
                "Consultant skill projection unchanged",
                consultant_id=consultant_id,
                skill_id=skill_id,
                action=action.value,
            )
        return changed
