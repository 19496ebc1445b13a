"""
Skill Record Data Transfer Objects.

Request and result DTOs for the consultant skill service. Enumerated inputs
(category, level, assessment type, ...) are accepted as plain strings and
checked by the service, so that bad values surface as domain validation
errors rather than DTO construction errors.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...domain.skills.entities.skill_record import SkillRecord
from ...domain.skills.repositories.skill_record_repository import SortField, SortOrder


class AccessContext(BaseModel):
    """Resolved caller identity and tenant-scoping mode."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str | None = Field(None, description="Caller's tenant")
    user_id: str | None = Field(None, description="Acting user")
    skip_tenant_check: bool = Field(
        False, description="Bypass tenant ownership checks (self-service flows)"
    )

    def enforces_tenant(self) -> bool:
        return self.tenant_id is not None and not self.skip_tenant_check


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# Creation


class SelfAssessmentInput(RequestModel):
    level: str
    score: float | None = None
    notes: str | None = None


class ProficiencyInput(RequestModel):
    level: str | None = None
    score: float | None = None
    self_assessment: SelfAssessmentInput | None = None


class ExperienceInput(RequestModel):
    years_of_experience: float = Field(0, ge=0)
    months_of_experience: float = Field(0, ge=0)
    first_used: datetime | None = None
    last_used: datetime | None = None
    currently_using: bool = True
    contexts: list[str] = Field(default_factory=list)


class MilestoneInput(RequestModel):
    title: str
    target_date: datetime | None = None
    achieved: bool = False
    achieved_at: datetime | None = None


class GoalsInput(RequestModel):
    target_level: str | None = None
    target_date: datetime | None = None
    development_plan: str | None = None
    milestones: list[MilestoneInput] = Field(default_factory=list)


class CreateSkillRecordRequest(RequestModel):
    """DTO for creating a skill record."""

    name: str | None = Field(None, description="Skill display name")
    category: str | None = Field(None, description="Skill category")
    subcategory: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)
    related_skills: list[str] = Field(default_factory=list)
    proficiency: ProficiencyInput | None = None
    experience: ExperienceInput | None = None
    goals: GoalsInput | None = None
    is_primary: bool = False
    is_featured: bool = False
    notes: str | None = None


# Update


class SkillInfoUpdate(RequestModel):
    description: str | None = None
    subcategory: str | None = None
    tags: list[str] | None = None
    aliases: list[str] | None = None


class ExperienceUpdate(RequestModel):
    years_of_experience: float | None = Field(None, ge=0)
    months_of_experience: float | None = Field(None, ge=0)
    first_used: datetime | None = None
    last_used: datetime | None = None
    currently_using: bool | None = None
    contexts: list[str] | None = None


class GoalsUpdate(RequestModel):
    target_level: str | None = None
    target_date: datetime | None = None
    development_plan: str | None = None
    milestones: list[MilestoneInput] | None = None


class UpdateSkillRecordRequest(RequestModel):
    """
    DTO for updating a skill record.

    Only fields explicitly set on the request are applied.
    """

    skill: SkillInfoUpdate | None = None
    experience: ExperienceUpdate | None = None
    goals: GoalsUpdate | None = None
    is_primary: bool | None = None
    is_featured: bool | None = None


# Assessment and verification


class AssessmentSubmission(RequestModel):
    type: str | None = Field(None, description="self, manager, peer, certification or test")
    level: str | None = None
    score: float | None = None
    notes: str | None = None


class AssessmentRequest(RequestModel):
    assessor_id: str | None = None
    type: str | None = Field(None, description="manager or peer")
    message: str | None = None


class CertificationRequest(RequestModel):
    certification_id: str | None = None
    certification_name: str | None = None
    score: float | None = None
    earned_at: datetime | None = None


# Endorsements, projects and training


class EndorsementRequest(RequestModel):
    relationship: str | None = None
    comment: str | None = None
    rating: int | None = None
    project_context: str | None = None


class ProjectFeedbackRequest(RequestModel):
    rating: int | None = None
    comment: str | None = None


class ProjectExperienceRequest(RequestModel):
    project_ref: str | None = Field(None, description="External project reference")
    project_name: str | None = None
    client_name: str | None = None
    role: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    hours_logged: float = Field(0, ge=0)
    responsibilities: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    skill_application: str | None = None
    complexity: str | None = None
    feedback: ProjectFeedbackRequest | None = None


class CertificateInput(RequestModel):
    name: str | None = None
    issuer: str | None = None
    certificate_url: str | None = None
    issued_at: datetime | None = None
    expires_at: datetime | None = None


class CompletedCourseRequest(RequestModel):
    course_id: str | None = None
    course_name: str | None = None
    provider: str | None = None
    completed_at: datetime | None = None
    score: float | None = None
    duration: float | None = Field(None, description="Duration in hours")
    certificate: CertificateInput | None = None


class CourseEnrollmentRequest(RequestModel):
    course_id: str | None = None
    course_name: str | None = None
    provider: str | None = None
    enrolled_at: datetime | None = None
    expected_completion: datetime | None = None
    progress: float = Field(0, ge=0, le=100)


# Queries


class SkillListQuery(RequestModel):
    """Filters, sorting and pagination for a consultant's skill list."""

    category: str | None = None
    level: str | None = None
    verified: bool = False
    active_only: bool = False
    primary_only: bool = False
    sort_by: SortField = "score"
    sort_order: SortOrder = "desc"
    skip: int = 0
    limit: int | None = None


class RequiredSkill(RequestModel):
    name: str
    target_level: str | None = None


# Results


class PaginationInfo(BaseModel):
    total: int
    limit: int
    skip: int
    has_more: bool


class PaginatedSkillRecords(BaseModel):
    data: list[SkillRecord]
    pagination: PaginationInfo


class BulkItemIssue(BaseModel):
    skill_name: str | None
    reason: str
    error: dict[str, Any] | None = None


class BulkCreateReport(BaseModel):
    created: list[SkillRecord] = Field(default_factory=list)
    skipped: list[BulkItemIssue] = Field(default_factory=list)
    failed: list[BulkItemIssue] = Field(default_factory=list)


class AssessmentRequestReceipt(BaseModel):
    success: bool = True
    message: str = "Assessment request sent successfully"
    skill_record_id: str
    assessor_id: str


class DeletionResult(BaseModel):
    success: bool = True
    skill_record_id: str
    skill_name: str
    deleted: bool = True
    hard_delete: bool = False
