"""
SkillRecord Repository Interface

Defines the contract for skill record persistence. Every mutation of a stored
record goes through ``mutate``, which applies a domain function to the record
inside a single row-locked transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Literal, TypeVar

from pydantic import Field

from ...shared.base import ValueObject
from ..entities.skill_record import SkillRecord
from ..value_objects.analysis import SkillDistribution, SkillStatistics
from ..value_objects.enums import ProficiencyLevel, SkillCategory

T = TypeVar("T")

SortField = Literal[
    "score",
    "name",
    "category",
    "level",
    "years_of_experience",
    "created_at",
    "updated_at",
]
SortOrder = Literal["asc", "desc"]


class SkillRecordFilter(ValueObject):
    """Filters for listing one consultant's skill records."""

    category: SkillCategory | None = None
    level: ProficiencyLevel | None = None
    verified: bool = False
    active_only: bool = False
    primary_only: bool = False


class PageRequest(ValueObject):
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1)
    sort_by: SortField = "score"
    sort_order: SortOrder = "desc"


class SkillRecordRepository(ABC):
    """Abstract repository interface for SkillRecord aggregates."""

    @abstractmethod
    async def add(self, record: SkillRecord) -> SkillRecord:
        """
        Persist a new skill record.

        Raises:
            DuplicateSkillError: If the consultant already holds a non-deleted
                record with the same normalized name
            ConflictError: If the record code is already taken
            RepositoryError: If the store fails
        """

    @abstractmethod
    async def get(
        self, id_or_code: str, include_deleted: bool = False
    ) -> SkillRecord | None:
        """
        Retrieve a record by store key or record code.

        Codes are matched upper-cased. Soft-deleted records are returned only
        when ``include_deleted`` is set.
        """

    @abstractmethod
    async def exists_for_consultant(
        self, tenant_id: str, consultant_id: str, normalized_name: str
    ) -> bool:
        """Check for a non-deleted record with this normalized name."""

    @abstractmethod
    async def count_for_consultant(self, consultant_id: str) -> int:
        """Count the consultant's non-deleted records."""

    @abstractmethod
    async def find_for_consultant(
        self,
        consultant_id: str,
        tenant_id: str | None,
        filters: SkillRecordFilter,
        page: PageRequest,
    ) -> tuple[list[SkillRecord], int]:
        """
        List a consultant's non-deleted records.

        Returns:
            The requested page and the total number of matching records
        """

    @abstractmethod
    async def mutate(
        self, record_id: str, mutation: Callable[[SkillRecord], T]
    ) -> tuple[SkillRecord, T]:
        """
        Apply ``mutation`` to a record atomically.

        The record is loaded under a row lock, ``mutation`` runs against it
        and the result is written back in the same transaction. Any exception
        raised by ``mutation`` aborts the write.

        Returns:
            The updated record and the mutation's return value

        Raises:
            SkillRecordNotFoundError: If the record does not exist or is deleted
        """

    @abstractmethod
    async def hard_delete(self, record_id: str) -> bool:
        """Remove a record permanently; returns False if it did not exist."""

    @abstractmethod
    async def find_search_candidates(
        self,
        tenant_id: str,
        terms: list[str],
        category: SkillCategory | None = None,
        min_score: float | None = None,
    ) -> list[SkillRecord]:
        """Non-deleted records whose searchable text contains any term."""

    @abstractmethod
    async def find_active(
        self,
        tenant_id: str | None = None,
        consultant_id: str | None = None,
        normalized_names: list[str] | None = None,
    ) -> list[SkillRecord]:
        """Active, non-deleted records in creation order."""

    @abstractmethod
    async def get_statistics(
        self,
        tenant_id: str,
        consultant_id: str | None = None,
        recent_limit: int = 10,
    ) -> SkillStatistics:
        """Grouped statistics over non-deleted records."""

    @abstractmethod
    async def get_distribution(
        self,
        tenant_id: str,
        consultant_id: str | None = None,
        top_limit: int = 20,
    ) -> SkillDistribution:
        """Category, level and top-skill distribution over non-deleted records."""
