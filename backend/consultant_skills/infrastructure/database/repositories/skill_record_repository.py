"""
SQL implementation of the SkillRecord repository.

Records live in ``consultant_skill_records`` as a JSON document plus derived
scalar columns. Each public method runs in its own session; mutations hold a
row lock for the duration of the read-modify-write.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ....core.observability import get_logger
from ....domain.shared.exceptions import (
    ConflictError,
    DuplicateSkillError,
    RepositoryError,
    SkillRecordNotFoundError,
)
from ....domain.skills.entities.skill_record import SkillRecord
from ....domain.skills.repositories.skill_record_repository import (
    PageRequest,
    SkillRecordFilter,
    SkillRecordRepository,
)
from ....domain.skills.value_objects.analysis import (
    CategoryBucket,
    LevelBucket,
    RecentlyUpdatedSkill,
    SkillAverages,
    SkillDistribution,
    SkillStatistics,
    TopSkill,
    VerificationBucket,
)
from ....domain.skills.value_objects.enums import (
    VERIFIED_STATUSES,
    SkillCategory,
    SkillStatus,
)
from ....domain.skills.value_objects.identifiers import is_object_id
from ..models import SkillRecordRow
from .mappers import apply_record_to_row, row_to_skill_record, skill_record_to_row

T = TypeVar("T")

logger = get_logger(__name__)

SORT_COLUMNS = {
    "score": SkillRecordRow.score,
    "name": SkillRecordRow.normalized_name,
    "category": SkillRecordRow.category,
    "level": SkillRecordRow.level_rank,
    "years_of_experience": SkillRecordRow.years_of_experience,
    "created_at": SkillRecordRow.created_at,
    "updated_at": SkillRecordRow.updated_at,
}


def _round(value: Any, digits: int = 2) -> float | None:
    return round(float(value), digits) if value is not None else None


class SqlSkillRecordRepository(SkillRecordRepository):
    """Skill record repository backed by SQLModel/SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def add(self, record: SkillRecord) -> SkillRecord:
        row = skill_record_to_row(record)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError as e:
            if "record_code" in str(e.orig):
                raise ConflictError(
                    "Skill record code already exists",
                    {"record_code": record.record_code},
                ) from e
            raise DuplicateSkillError(record.skill.name) from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during add: {str(e)}") from e
        return record

    async def get(
        self, id_or_code: str, include_deleted: bool = False
    ) -> SkillRecord | None:
        try:
            async with self.session_factory() as session:
                row = None
                if is_object_id(id_or_code):
                    row = await session.get(SkillRecordRow, id_or_code)
                if row is None:
                    statement = select(SkillRecordRow).where(
                        SkillRecordRow.record_code == id_or_code.upper()
                    )
                    row = (await session.exec(statement)).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during get: {str(e)}") from e

        if row is None or (row.is_deleted and not include_deleted):
            return None
        return row_to_skill_record(row)

    async def exists_for_consultant(
        self, tenant_id: str, consultant_id: str, normalized_name: str
    ) -> bool:
        statement = select(SkillRecordRow.id).where(
            SkillRecordRow.tenant_id == tenant_id,
            SkillRecordRow.consultant_id == consultant_id,
            SkillRecordRow.normalized_name == normalized_name,
            SkillRecordRow.is_deleted == False,  # noqa: E712
        )
        try:
            async with self.session_factory() as session:
                return (await session.exec(statement)).first() is not None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during lookup: {str(e)}") from e

    async def count_for_consultant(self, consultant_id: str) -> int:
        statement = select(func.count(SkillRecordRow.id)).where(
            SkillRecordRow.consultant_id == consultant_id,
            SkillRecordRow.is_deleted == False,  # noqa: E712
        )
        try:
            async with self.session_factory() as session:
                return (await session.exec(statement)).one()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during count: {str(e)}") from e

    async def find_for_consultant(
        self,
        consultant_id: str,
        tenant_id: str | None,
        filters: SkillRecordFilter,
        page: PageRequest,
    ) -> tuple[list[SkillRecord], int]:
        conditions = [
            SkillRecordRow.consultant_id == consultant_id,
            SkillRecordRow.is_deleted == False,  # noqa: E712
        ]
        if tenant_id is not None:
            conditions.append(SkillRecordRow.tenant_id == tenant_id)
        if filters.category is not None:
            conditions.append(SkillRecordRow.category == filters.category.value)
        if filters.level is not None:
            conditions.append(SkillRecordRow.level == filters.level.value)
        if filters.verified:
            conditions.append(
                col(SkillRecordRow.verification_status).in_(
                    [status.value for status in VERIFIED_STATUSES]
                )
            )
        if filters.active_only:
            conditions.append(SkillRecordRow.status_current == SkillStatus.ACTIVE.value)
        if filters.primary_only:
            conditions.append(SkillRecordRow.is_primary == True)  # noqa: E712

        sort_column = SORT_COLUMNS[page.sort_by]
        order = sort_column.asc() if page.sort_order == "asc" else sort_column.desc()

        statement = (
            select(SkillRecordRow)
            .where(*conditions)
            .order_by(order, SkillRecordRow.id)
            .offset(page.skip)
            .limit(page.limit)
        )
        count_statement = select(func.count(SkillRecordRow.id)).where(*conditions)

        try:
            async with self.session_factory() as session:
                rows = (await session.exec(statement)).all()
                total = (await session.exec(count_statement)).one()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during find: {str(e)}") from e

        return [row_to_skill_record(row) for row in rows], total

    async def mutate(
        self, record_id: str, mutation: Callable[[SkillRecord], T]
    ) -> tuple[SkillRecord, T]:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    statement = (
                        select(SkillRecordRow)
                        .where(SkillRecordRow.id == record_id)
                        .with_for_update()
                    )
                    row = (await session.exec(statement)).first()
                    if row is None or row.is_deleted:
                        raise SkillRecordNotFoundError(record_id)

                    record = row_to_skill_record(row)
                    result = mutation(record)
                    apply_record_to_row(record, row)
                    flag_modified(row, "document")
        except IntegrityError as e:
            raise ConflictError(
                "Skill record update conflicts with an existing record",
                {"skill_record_id": record_id},
            ) from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during update: {str(e)}") from e

        logger.debug("Skill record written", skill_record_id=record_id)
        return record, result

    async def hard_delete(self, record_id: str) -> bool:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await session.get(SkillRecordRow, record_id)
                    if row is None:
                        return False
                    await session.delete(row)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during delete: {str(e)}") from e
        return True

    async def find_search_candidates(
        self,
        tenant_id: str,
        terms: list[str],
        category: SkillCategory | None = None,
        min_score: float | None = None,
    ) -> list[SkillRecord]:
        if not terms:
            return []
        conditions = [
            SkillRecordRow.tenant_id == tenant_id,
            SkillRecordRow.is_deleted == False,  # noqa: E712
            or_(*(col(SkillRecordRow.search_text).contains(term) for term in terms)),
        ]
        if category is not None:
            conditions.append(SkillRecordRow.category == category.value)
        if min_score is not None:
            conditions.append(SkillRecordRow.score >= min_score)

        statement = select(SkillRecordRow).where(*conditions)
        try:
            async with self.session_factory() as session:
                rows = (await session.exec(statement)).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during search: {str(e)}") from e
        return [row_to_skill_record(row) for row in rows]

    async def find_active(
        self,
        tenant_id: str | None = None,
        consultant_id: str | None = None,
        normalized_names: list[str] | None = None,
    ) -> list[SkillRecord]:
        conditions = [
            SkillRecordRow.is_deleted == False,  # noqa: E712
            SkillRecordRow.is_active == True,  # noqa: E712
        ]
        if tenant_id is not None:
            conditions.append(SkillRecordRow.tenant_id == tenant_id)
        if consultant_id is not None:
            conditions.append(SkillRecordRow.consultant_id == consultant_id)
        if normalized_names is not None:
            conditions.append(col(SkillRecordRow.normalized_name).in_(normalized_names))

        statement = (
            select(SkillRecordRow)
            .where(*conditions)
            .order_by(SkillRecordRow.created_at, SkillRecordRow.id)
        )
        try:
            async with self.session_factory() as session:
                rows = (await session.exec(statement)).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during find: {str(e)}") from e
        return [row_to_skill_record(row) for row in rows]

    def _scope(self, tenant_id: str, consultant_id: str | None) -> list[Any]:
        conditions = [
            SkillRecordRow.tenant_id == tenant_id,
            SkillRecordRow.is_deleted == False,  # noqa: E712
        ]
        if consultant_id is not None:
            conditions.append(SkillRecordRow.consultant_id == consultant_id)
        return conditions

    async def _category_buckets(
        self, session: AsyncSession, conditions: list[Any]
    ) -> list[CategoryBucket]:
        count = func.count(SkillRecordRow.id).label("record_count")
        result = await session.exec(
            select(
                SkillRecordRow.category,
                count,
                func.avg(SkillRecordRow.score).label("avg_score"),
            )
            .where(*conditions)
            .group_by(SkillRecordRow.category)
            .order_by(count.desc(), SkillRecordRow.category)
        )
        return [
            CategoryBucket(
                category=row.category,
                count=row.record_count,
                avg_score=_round(row.avg_score) or 0.0,
            )
            for row in result.all()
        ]

    async def _level_buckets(
        self, session: AsyncSession, conditions: list[Any]
    ) -> list[LevelBucket]:
        result = await session.exec(
            select(SkillRecordRow.level, func.count(SkillRecordRow.id).label("record_count"))
            .where(*conditions)
            .group_by(SkillRecordRow.level, SkillRecordRow.level_rank)
            .order_by(SkillRecordRow.level_rank)
        )
        return [LevelBucket(level=row.level, count=row.record_count) for row in result.all()]

    async def get_statistics(
        self,
        tenant_id: str,
        consultant_id: str | None = None,
        recent_limit: int = 10,
    ) -> SkillStatistics:
        conditions = self._scope(tenant_id, consultant_id)
        try:
            async with self.session_factory() as session:
                total = (
                    await session.exec(
                        select(func.count(SkillRecordRow.id)).where(*conditions)
                    )
                ).one()
                by_category = await self._category_buckets(session, conditions)
                by_level = await self._level_buckets(session, conditions)

                verification_rows = await session.exec(
                    select(
                        SkillRecordRow.verification_status,
                        func.count(SkillRecordRow.id).label("record_count"),
                    )
                    .where(*conditions)
                    .group_by(SkillRecordRow.verification_status)
                    .order_by(SkillRecordRow.verification_status)
                )
                by_verification = [
                    VerificationBucket(status=row.verification_status, count=row.record_count)
                    for row in verification_rows.all()
                ]

                averages_row = (
                    await session.exec(
                        select(
                            func.avg(SkillRecordRow.score).label("avg_score"),
                            func.avg(SkillRecordRow.years_of_experience).label(
                                "avg_experience"
                            ),
                        ).where(*conditions)
                    )
                ).one()

                recent_rows = (
                    await session.exec(
                        select(SkillRecordRow)
                        .where(*conditions)
                        .order_by(col(SkillRecordRow.updated_at).desc())
                        .limit(recent_limit)
                    )
                ).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during statistics: {str(e)}") from e

        return SkillStatistics(
            total=total,
            by_category=by_category,
            by_level=by_level,
            by_verification=by_verification,
            averages=SkillAverages(
                avg_score=_round(averages_row.avg_score),
                avg_experience=_round(averages_row.avg_experience),
            ),
            recently_updated=[
                RecentlyUpdatedSkill(
                    skill_record_id=row.id,
                    record_code=row.record_code,
                    name=row.name,
                    level=row.level,
                    updated_at=row.document["updated_at"],
                )
                for row in recent_rows
            ],
        )

    async def get_distribution(
        self,
        tenant_id: str,
        consultant_id: str | None = None,
        top_limit: int = 20,
    ) -> SkillDistribution:
        conditions = self._scope(tenant_id, consultant_id)
        try:
            async with self.session_factory() as session:
                by_category = await self._category_buckets(session, conditions)
                by_level = await self._level_buckets(session, conditions)

                count = func.count(SkillRecordRow.id).label("record_count")
                top_rows = await session.exec(
                    select(
                        SkillRecordRow.normalized_name,
                        func.min(SkillRecordRow.name).label("name"),
                        count,
                        func.avg(SkillRecordRow.score).label("avg_score"),
                    )
                    .where(*conditions)
                    .group_by(SkillRecordRow.normalized_name)
                    .order_by(count.desc(), SkillRecordRow.normalized_name)
                    .limit(top_limit)
                )
                top_skills = [
                    TopSkill(
                        normalized_name=row.normalized_name,
                        name=row.name,
                        count=row.record_count,
                        avg_score=_round(row.avg_score) or 0.0,
                    )
                    for row in top_rows.all()
                ]
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error during distribution: {str(e)}") from e

        return SkillDistribution(
            by_category=by_category, by_level=by_level, top_skills=top_skills
        )
