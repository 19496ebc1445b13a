"""
SkillRecord aggregate.

A skill record holds one consultant's proficiency, verification, endorsements,
project history and training for a single skill. It is scoped to exactly one
tenant and stored as a single document, so every mutation of the aggregate
is one atomic store write.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator

from ...shared.base import DomainModel, UtcDateTime, ValueObject, utc_now
from ..value_objects.enums import (
    AssessmentType,
    ProficiencyLevel,
    ProjectComplexity,
    SkillApplication,
    SkillCategory,
    SkillSource,
    SkillStatus,
    VerificationStatus,
)
from ..value_objects.identifiers import (
    generate_object_id,
    generate_record_code,
    normalize_skill_name,
)
from ..value_objects.proficiency import Assessment, CertificationDetails


class SkillInfo(DomainModel):
    name: str = Field(min_length=1, max_length=200)
    normalized_name: str = ""
    category: SkillCategory
    subcategory: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)
    related_skills: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Skill name cannot be blank")
        return v

    @model_validator(mode="after")
    def _derive_normalized_name(self) -> "SkillInfo":
        normalized = normalize_skill_name(self.name)
        if self.normalized_name != normalized:
            # Bypass validate_assignment to avoid re-entering this validator
            object.__setattr__(self, "normalized_name", normalized)
        return self


class Proficiency(DomainModel):
    level: ProficiencyLevel = ProficiencyLevel.BEGINNER
    score: float = Field(default=20, ge=0, le=100)
    self_assessment: Assessment | None = None
    manager_assessment: Assessment | None = None
    peer_assessments: list[Assessment] = Field(default_factory=list)
    certification_based: CertificationDetails | None = None


class Experience(DomainModel):
    years_of_experience: float = Field(default=0, ge=0)
    months_of_experience: float = Field(default=0, ge=0)
    first_used: UtcDateTime | None = None
    last_used: UtcDateTime | None = None
    currently_using: bool = True
    total_projects: int = Field(default=0, ge=0)
    total_hours: float = Field(default=0, ge=0)
    contexts: list[str] = Field(default_factory=list)


class ProjectFeedback(ValueObject):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = None
    given_by: str | None = None
    given_at: UtcDateTime = Field(default_factory=utc_now)


class ProjectExperience(DomainModel):
    id: str = Field(default_factory=generate_object_id)
    project_ref: str | None = None
    project_name: str = Field(min_length=1)
    client_name: str | None = None
    role: str | None = None
    start_date: UtcDateTime
    end_date: UtcDateTime | None = None
    hours_logged: float = Field(default=0, ge=0)
    responsibilities: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    skill_application: SkillApplication = SkillApplication.PRIMARY
    complexity: ProjectComplexity = ProjectComplexity.MODERATE
    feedback: ProjectFeedback | None = None

    def matches(self, project_ref_or_id: str) -> bool:
        """Match by external project reference or internal sub-id."""
        return project_ref_or_id in {self.project_ref, self.id}


class Certificate(ValueObject):
    name: str | None = None
    issuer: str | None = None
    certificate_url: str | None = None
    issued_at: UtcDateTime | None = None
    expires_at: UtcDateTime | None = None


class CompletedCourse(ValueObject):
    course_id: str
    course_name: str
    provider: str | None = None
    completed_at: UtcDateTime = Field(default_factory=utc_now)
    score: float | None = None
    duration: float | None = None  # hours
    certificate: Certificate | None = None


class CourseEnrollment(DomainModel):
    course_id: str
    course_name: str | None = None
    provider: str | None = None
    enrolled_at: UtcDateTime = Field(default_factory=utc_now)
    expected_completion: UtcDateTime | None = None
    progress: float = Field(default=0, ge=0, le=100)


class Training(DomainModel):
    courses_completed: list[CompletedCourse] = Field(default_factory=list)
    currently_enrolled: list[CourseEnrollment] = Field(default_factory=list)

    def find_enrollment(self, course_id: str) -> CourseEnrollment | None:
        for enrollment in self.currently_enrolled:
            if enrollment.course_id == course_id:
                return enrollment
        return None


class Endorsement(ValueObject):
    id: str = Field(default_factory=generate_object_id)
    endorser_id: str
    relationship: str | None = None
    comment: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    project_context: str | None = None
    endorsed_at: UtcDateTime = Field(default_factory=utc_now)


class VerificationEvent(ValueObject):
    """Immutable entry in a record's verification history."""

    type: AssessmentType
    assessed_by: str | None = None
    level: ProficiencyLevel | None = None
    score: float | None = None
    assessed_at: UtcDateTime = Field(default_factory=utc_now)
    notes: str | None = None
    certification_name: str | None = None


class Verification(DomainModel):
    status: VerificationStatus = VerificationStatus.NOT_VERIFIED
    verified_by: str | None = None
    verified_at: UtcDateTime | None = None
    history: list[VerificationEvent] = Field(default_factory=list)


class Milestone(ValueObject):
    title: str
    target_date: UtcDateTime | None = None
    achieved: bool = False
    achieved_at: UtcDateTime | None = None


class Goals(DomainModel):
    target_level: ProficiencyLevel | None = None
    target_date: UtcDateTime | None = None
    development_plan: str | None = None
    milestones: list[Milestone] = Field(default_factory=list)


class RecordStatus(DomainModel):
    current: SkillStatus = SkillStatus.ACTIVE
    is_primary: bool = False
    is_featured: bool = False
    is_active: bool = True
    is_deleted: bool = False
    deleted_at: UtcDateTime | None = None
    deleted_by: str | None = None


class RecordMetadata(DomainModel):
    source: SkillSource = SkillSource.MANUAL
    created_by: str | None = None
    updated_by: str | None = None
    notes: str | None = None


class ConsultantSkillSummary(ValueObject):
    """Denormalized skill entry kept in the consultant's own skill list."""

    skill_id: str
    name: str
    category: SkillCategory
    proficiency_level: ProficiencyLevel
    years_of_experience: float = 0
    last_used: UtcDateTime | None = None
    verified: bool = False


class SkillRecord(DomainModel):
    """Per-consultant, per-skill aggregate root."""

    id: str = Field(default_factory=generate_object_id)
    record_code: str = Field(default_factory=generate_record_code)
    tenant_id: str
    consultant_id: str
    organization_id: str | None = None

    skill: SkillInfo
    proficiency: Proficiency = Field(default_factory=Proficiency)
    experience: Experience = Field(default_factory=Experience)
    project_history: list[ProjectExperience] = Field(default_factory=list)
    training: Training = Field(default_factory=Training)
    endorsements: list[Endorsement] = Field(default_factory=list)
    verification: Verification = Field(default_factory=Verification)
    goals: Goals = Field(default_factory=Goals)
    status: RecordStatus = Field(default_factory=RecordStatus)
    metadata: RecordMetadata = Field(default_factory=RecordMetadata)

    created_at: UtcDateTime = Field(default_factory=utc_now)
    updated_at: UtcDateTime = Field(default_factory=utc_now)

    @property
    def normalized_name(self) -> str:
        return self.skill.normalized_name

    @property
    def is_verified(self) -> bool:
        return self.verification.status != VerificationStatus.NOT_VERIFIED

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        return self.tenant_id == tenant_id

    def find_endorsement_by(self, endorser_id: str) -> Endorsement | None:
        for endorsement in self.endorsements:
            if endorsement.endorser_id == endorser_id:
                return endorsement
        return None

    def find_project(self, project_ref_or_id: str) -> ProjectExperience | None:
        for project in self.project_history:
            if project.matches(project_ref_or_id):
                return project
        return None

    def touch(self, user_id: str | None = None) -> None:
        """Stamp the record as updated."""
        self.updated_at = utc_now()
        if user_id is not None:
            self.metadata.updated_by = user_id

    def to_summary(self) -> ConsultantSkillSummary:
        return ConsultantSkillSummary(
            skill_id=self.id,
            name=self.skill.name,
            category=self.skill.category,
            proficiency_level=self.proficiency.level,
            years_of_experience=self.experience.years_of_experience,
            last_used=self.experience.last_used,
            verified=self.is_verified,
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible document."""
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "SkillRecord":
        return cls.model_validate(document)
