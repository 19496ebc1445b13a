"""
Consultant Repository Interface

Read access to consultant identity plus writes to the denormalized skill
summary list, keyed by skill id.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..entities.consultant import Consultant
from ..entities.skill_record import ConsultantSkillSummary


class ConsultantRepository(ABC):
    """Abstract repository interface for the consultant collaborator."""

    @abstractmethod
    async def get(self, consultant_id: str) -> Consultant | None:
        pass

    @abstractmethod
    async def get_many(self, consultant_ids: Iterable[str]) -> dict[str, Consultant]:
        """Fetch consultants by id; missing ids are absent from the result."""
        pass

    @abstractmethod
    async def add(self, consultant: Consultant) -> Consultant:
        pass

    @abstractmethod
    async def push_skill(
        self, consultant_id: str, summary: ConsultantSkillSummary
    ) -> bool:
        """
        Add a summary to the consultant's skill list.

        An existing entry with the same skill id is replaced, so repeating the
        call is harmless.

        Returns:
            False if the consultant does not exist
        """
        pass

    @abstractmethod
    async def set_skill(self, consultant_id: str, summary: ConsultantSkillSummary) -> bool:
        """
        Replace the entry matching ``summary.skill_id``.

        Returns:
            False if the consultant or the entry does not exist
        """
        pass

    @abstractmethod
    async def pull_skill(self, consultant_id: str, skill_id: str) -> bool:
        """
        Remove the entry for ``skill_id``.

        Returns:
            False if nothing was removed
        """
        pass
