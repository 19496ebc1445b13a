"""
SQLModel database models for the skill engine.

Each skill record is stored as a JSON document alongside the scalar columns
that queries filter, sort and group on. The scalar columns are derived from
the document on every write.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, text
from sqlmodel import Column, Field, SQLModel


class SkillRecordRow(SQLModel, table=True):
    __tablename__ = "consultant_skill_records"

    id: str = Field(primary_key=True, max_length=24)
    record_code: str = Field(unique=True, index=True, max_length=32)
    tenant_id: str = Field(index=True)
    consultant_id: str = Field(index=True)
    organization_id: str | None = Field(default=None)

    name: str
    normalized_name: str = Field(index=True)
    category: str = Field(index=True)
    level: str
    level_rank: int = Field(default=1)
    score: float = Field(default=20)
    verification_status: str = Field(default="not_verified")
    status_current: str = Field(default="active")
    is_active: bool = Field(default=True)
    is_deleted: bool = Field(default=False, index=True)
    is_primary: bool = Field(default=False)
    years_of_experience: float = Field(default=0)
    search_text: str = Field(default="")

    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))

    document: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))

    __table_args__ = (
        # A consultant holds each skill name at most once among non-deleted records
        Index(
            "uq_skill_records_consultant_skill",
            "tenant_id",
            "consultant_id",
            "normalized_name",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("NOT is_deleted"),
        ),
        Index("idx_skill_records_tenant_consultant", "tenant_id", "consultant_id"),
    )


class ConsultantRow(SQLModel, table=True):
    __tablename__ = "consultants"

    id: str = Field(primary_key=True, max_length=24)
    tenant_id: str = Field(index=True)
    organization_id: str | None = Field(default=None)
    consultant_code: str = Field(index=True)
    first_name: str
    last_name: str
    email: str | None = Field(default=None)
    level: str | None = Field(default=None)
    department: str | None = Field(default=None)
    availability_status: str | None = Field(default=None)

    skills: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
