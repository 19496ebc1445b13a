"""
SQL implementation of the Consultant repository.

The consultant's skill list is a JSON column; summary writes rewrite that
column under a row lock.
"""

from collections.abc import Callable, Iterable
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ....domain.shared.exceptions import ConflictError, RepositoryError
from ....domain.skills.entities.consultant import Consultant
from ....domain.skills.entities.skill_record import ConsultantSkillSummary
from ....domain.skills.repositories.consultant_repository import ConsultantRepository
from ..models import ConsultantRow
from .mappers import consultant_to_row, row_to_consultant

SkillList = list[dict[str, Any]]


class SqlConsultantRepository(ConsultantRepository):
    """Consultant repository backed by SQLModel/SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, consultant_id: str) -> Consultant | None:
        try:
            async with self.session_factory() as session:
                row = await session.get(ConsultantRow, consultant_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during get: {str(e)}") from e
        return row_to_consultant(row) if row is not None else None

    async def get_many(self, consultant_ids: Iterable[str]) -> dict[str, Consultant]:
        ids = list(dict.fromkeys(consultant_ids))
        if not ids:
            return {}
        try:
            async with self.session_factory() as session:
                rows = (
                    await session.exec(
                        select(ConsultantRow).where(col(ConsultantRow.id).in_(ids))
                    )
                ).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during get_many: {str(e)}") from e
        return {row.id: row_to_consultant(row) for row in rows}

    async def add(self, consultant: Consultant) -> Consultant:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(consultant_to_row(consultant))
        except IntegrityError as e:
            raise ConflictError(
                "Consultant already exists", {"consultant_id": consultant.id}
            ) from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during add: {str(e)}") from e
        return consultant

    async def _update_skills(
        self, consultant_id: str, update: Callable[[SkillList], SkillList | None]
    ) -> bool:
        """Rewrite the skill list under a row lock; ``update`` returns None for no-op."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = (
                        await session.exec(
                            select(ConsultantRow)
                            .where(ConsultantRow.id == consultant_id)
                            .with_for_update()
                        )
                    ).first()
                    if row is None:
                        return False
                    skills = update(list(row.skills or []))
                    if skills is None:
                        return False
                    row.skills = skills
                    flag_modified(row, "skills")
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during skill sync: {str(e)}") from e
        return True

    async def push_skill(
        self, consultant_id: str, summary: ConsultantSkillSummary
    ) -> bool:
        entry = summary.model_dump(mode="json")

        def push(skills: SkillList) -> SkillList:
            return [s for s in skills if s.get("skill_id") != summary.skill_id] + [entry]

        return await self._update_skills(consultant_id, push)

    async def set_skill(self, consultant_id: str, summary: ConsultantSkillSummary) -> bool:
        entry = summary.model_dump(mode="json")

        def replace(skills: SkillList) -> SkillList | None:
            if not any(s.get("skill_id") == summary.skill_id for s in skills):
                return None
            return [entry if s.get("skill_id") == summary.skill_id else s for s in skills]

        return await self._update_skills(consultant_id, replace)

    async def pull_skill(self, consultant_id: str, skill_id: str) -> bool:
        def pull(skills: SkillList) -> SkillList | None:
            remaining = [s for s in skills if s.get("skill_id") != skill_id]
            return remaining if len(remaining) != len(skills) else None

        return await self._update_skills(consultant_id, pull)
