"""
Analysis Value Objects

Read-side results produced by skill matching, gap analysis, the skill matrix
and the statistics queries.
"""

from datetime import datetime

from pydantic import Field

from ...shared.base import ValueObject, utc_now
from .enums import (
    ProficiencyLevel,
    SkillCategory,
    VerificationStatus,
)


class ConsultantIdentity(ValueObject):
    """Compact consultant identity attached to cross-consultant results."""

    id: str
    consultant_code: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    level: str | None = None
    department: str | None = None
    availability_status: str | None = None


class SearchHit(ValueObject):
    skill_record_id: str
    record_code: str
    consultant_id: str
    name: str
    category: SkillCategory
    level: ProficiencyLevel
    score: float
    relevance: float
    consultant: ConsultantIdentity


class MatchedSkill(ValueObject):
    name: str
    level: ProficiencyLevel
    score: float


class ConsultantMatch(ValueObject):
    consultant_id: str
    consultant: ConsultantIdentity
    matched_skills: list[MatchedSkill]
    match_count: int
    match_percentage: int
    avg_score: int


class GapEntry(ValueObject):
    skill_name: str
    required_level: str | None = None
    required_score: int
    current_level: ProficiencyLevel = ProficiencyLevel.NONE
    current_score: float = 0
    gap: float | None = None
    surplus: float | None = None


class GapSummary(ValueObject):
    total_required: int
    matched: int
    exceeds: int
    gaps: int


class GapAnalysis(ValueObject):
    consultant_id: str
    readiness_score: int
    summary: GapSummary
    gaps: list[GapEntry] = Field(default_factory=list)
    matched: list[GapEntry] = Field(default_factory=list)
    exceeds: list[GapEntry] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)


class MatrixSkill(ValueObject):
    name: str
    normalized_name: str
    level: ProficiencyLevel
    score: float


class MatrixRow(ValueObject):
    consultant: ConsultantIdentity
    skills: list[MatrixSkill]


class SkillMatrix(ValueObject):
    consultants: list[MatrixRow] = Field(default_factory=list)
    skill_columns: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)


class CategoryBucket(ValueObject):
    category: SkillCategory
    count: int
    avg_score: float


class LevelBucket(ValueObject):
    level: ProficiencyLevel
    count: int


class VerificationBucket(ValueObject):
    status: VerificationStatus
    count: int


class RecentlyUpdatedSkill(ValueObject):
    skill_record_id: str
    record_code: str
    name: str
    level: ProficiencyLevel
    updated_at: datetime


class SkillAverages(ValueObject):
    avg_score: float | None = None
    avg_experience: float | None = None


class SkillStatistics(ValueObject):
    total: int
    by_category: list[CategoryBucket] = Field(default_factory=list)
    by_level: list[LevelBucket] = Field(default_factory=list)
    by_verification: list[VerificationBucket] = Field(default_factory=list)
    averages: SkillAverages = Field(default_factory=SkillAverages)
    recently_updated: list[RecentlyUpdatedSkill] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)


class TopSkill(ValueObject):
    normalized_name: str
    name: str
    count: int
    avg_score: float


class SkillDistribution(ValueObject):
    by_category: list[CategoryBucket] = Field(default_factory=list)
    by_level: list[LevelBucket] = Field(default_factory=list)
    top_skills: list[TopSkill] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)
