"""
Consultant Skill Application Service

Orchestrates skill record use cases: loads aggregates, enforces tenant scope,
delegates rules to the domain services and persists each mutation as one
atomic store write. Side effects (consultant projection, notifications,
analytics) are collected per operation and handed to the SideEffectRunner
after the primary write; their failures never fail the operation.
"""

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ...core.config import Settings, settings
from ...core.observability import get_logger, monitor_operation
from ...domain.shared.base import utc_now
from ...domain.shared.exceptions import (
    ConflictError,
    ConsultantNotFoundError,
    DomainError,
    DuplicateSkillError,
    ForbiddenError,
    SkillRecordNotFoundError,
    ValidationError,
)
from ...domain.skills.entities.consultant import Consultant
from ...domain.skills.entities.skill_record import (
    Certificate,
    CompletedCourse,
    CourseEnrollment,
    Endorsement,
    Experience,
    Goals,
    Milestone,
    ProjectExperience,
    ProjectFeedback,
    RecordMetadata,
    RecordStatus,
    SkillInfo,
    SkillRecord,
)
from ...domain.skills.repositories.consultant_repository import ConsultantRepository
from ...domain.skills.repositories.skill_record_repository import (
    PageRequest,
    SkillRecordFilter,
    SkillRecordRepository,
)
from ...domain.skills.services.endorsement_ledger import EndorsementLedger
from ...domain.skills.services.gap_analyzer import GapAnalyzer
from ...domain.skills.services.proficiency_engine import (
    ProficiencyEngine,
    parse_assessment_type,
    parse_level,
)
from ...domain.skills.services.project_history_ledger import ProjectHistoryLedger
from ...domain.skills.services.skill_matcher import SkillMatcher, search_terms
from ...domain.skills.services.training_ledger import TrainingLedger
from ...domain.skills.services.verification_state_machine import (
    VerificationStateMachine,
)
from ...domain.skills.value_objects.analysis import (
    ConsultantMatch,
    GapAnalysis,
    SearchHit,
    SkillDistribution,
    SkillMatrix,
    SkillStatistics,
)
from ...domain.skills.value_objects.enums import (
    AssessmentType,
    ProficiencyLevel,
    ProjectComplexity,
    SkillApplication,
    SkillCategory,
    SkillSource,
    SyncAction,
)
from ...domain.skills.value_objects.identifiers import (
    generate_course_id,
    normalize_skill_name,
)
from ...domain.skills.value_objects.proficiency import Assessment, CertificationDetails
from ..dtos.skill_dtos import (
    AccessContext,
    AssessmentRequest,
    AssessmentRequestReceipt,
    AssessmentSubmission,
    BulkCreateReport,
    BulkItemIssue,
    CertificationRequest,
    CompletedCourseRequest,
    CourseEnrollmentRequest,
    CreateSkillRecordRequest,
    DeletionResult,
    EndorsementRequest,
    PaginatedSkillRecords,
    PaginationInfo,
    ProficiencyInput,
    ProjectExperienceRequest,
    ProjectFeedbackRequest,
    RequiredSkill,
    SkillListQuery,
    UpdateSkillRecordRequest,
)
from .side_effects import (
    EffectReport,
    SendNotification,
    SideEffect,
    SideEffectRunner,
    SyncProjection,
    TrackEvent,
)

logger = get_logger(__name__)

T = TypeVar("T")

REQUESTABLE_ASSESSMENT_TYPES = (AssessmentType.MANAGER, AssessmentType.PEER)


@contextmanager
def _as_validation_error(message: str) -> Iterator[None]:
    """Translate model validation failures into the domain taxonomy."""
    try:
        yield
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()
        ]
        raise ValidationError(message, errors=errors) from e


def _check_rating(rating: int | None) -> None:
    if rating is not None and not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", details={"rating": rating})


def _parse_optional(enum_cls: type[T], value: str | None, default: T, message: str) -> T:
    if value is None:
        return default
    try:
        return enum_cls(value)  # type: ignore[call-arg]
    except ValueError:
        raise ValidationError(message, details={"value": value}) from None


class ConsultantSkillService:
    """
    Application service for consultant skill records.

    Every operation takes an AccessContext. When the context carries a tenant
    and does not skip tenant checks, records and consultants outside that
    tenant are rejected with ForbiddenError.
    """

    def __init__(
        self,
        skill_records: SkillRecordRepository,
        consultants: ConsultantRepository,
        effects: SideEffectRunner,
        config: Settings = settings,
    ):
        self.skill_records = skill_records
        self.consultants = consultants
        self.effects = effects
        self.config = config

        self.engine = ProficiencyEngine(
            config.PROFICIENCY_SCORING_MODE, config.assessment_weights
        )
        self.verification = VerificationStateMachine()
        self.endorsements = EndorsementLedger(config.MAX_ENDORSEMENTS_PER_SKILL)
        self.projects = ProjectHistoryLedger(config.MAX_PROJECT_HISTORY_PER_SKILL)
        self.training = TrainingLedger()
        self.matcher = SkillMatcher()
        self.gap_analyzer = GapAnalyzer()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_tenant(record: SkillRecord, ctx: AccessContext) -> None:
        if ctx.enforces_tenant() and not record.belongs_to_tenant(ctx.tenant_id):
            raise ForbiddenError(
                "Access denied to this skill record",
                {"skill_record_id": record.record_code},
            )

    async def _load(
        self, id_or_code: str, ctx: AccessContext, include_deleted: bool = False
    ) -> SkillRecord:
        record = await self.skill_records.get(id_or_code, include_deleted=include_deleted)
        if record is None:
            raise SkillRecordNotFoundError(id_or_code)
        self._check_tenant(record, ctx)
        return record

    async def _mutate(
        self,
        id_or_code: str,
        ctx: AccessContext,
        mutation: Callable[[SkillRecord], T],
    ) -> tuple[SkillRecord, T]:
        """
        Tenant-check a record, then apply ``mutation`` under the row lock.

        The mutation stamps ``updated_at``/``updated_by`` after the domain
        change succeeds.
        """
        current = await self._load(id_or_code, ctx)

        def apply(record: SkillRecord) -> T:
            result = mutation(record)
            record.touch(ctx.user_id)
            return result

        return await self.skill_records.mutate(current.id, apply)

    @staticmethod
    def _event(record: SkillRecord, event_type: str, **data: Any) -> TrackEvent:
        return TrackEvent(
            event_type=event_type,
            entity_id=record.id,
            tenant_id=record.tenant_id,
            payload={
                "skill_record_id": record.record_code,
                "consultant_id": record.consultant_id,
                "skill_name": record.skill.name,
                **data,
            },
        )

    @staticmethod
    def _sync(record: SkillRecord, action: SyncAction) -> SyncProjection:
        return SyncProjection(
            consultant_id=record.consultant_id,
            action=action,
            skill_id=record.id,
            summary=record.to_summary() if action != SyncAction.REMOVE else None,
        )

    async def _consultant_contact(self, consultant_id: str) -> Consultant | None:
        """Look up the consultant for a notification; lookup failures only skip it."""
        try:
            return await self.consultants.get(consultant_id)
        except DomainError as e:
            logger.warning(
                "Failed to load consultant for notification",
                consultant_id=consultant_id,
                error=str(e),
            )
            return None

    async def _run_effects(self, effects: Sequence[SideEffect]) -> EffectReport:
        report = await self.effects.run(effects)
        if not report.all_succeeded:
            logger.warning("Some side effects failed", failed=report.failed)
        return report

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_create(data: CreateSkillRecordRequest) -> list[str]:
        errors: list[str] = []
        if not data.name or not data.name.strip():
            errors.append("Skill name is required")
        if not data.category:
            errors.append("Skill category is required")
        elif data.category not in {c.value for c in SkillCategory}:
            errors.append(f"Invalid skill category: {data.category}")

        levels = {level.value for level in ProficiencyLevel}
        proficiency = data.proficiency
        if proficiency is not None:
            if proficiency.level is not None and proficiency.level not in levels:
                errors.append(f"Invalid proficiency level: {proficiency.level}")
            if (
                proficiency.self_assessment is not None
                and proficiency.self_assessment.level not in levels
            ):
                errors.append(
                    f"Invalid self-assessment level: {proficiency.self_assessment.level}"
                )
        if data.goals is not None and data.goals.target_level is not None:
            if data.goals.target_level not in levels:
                errors.append(f"Invalid target level: {data.goals.target_level}")
        return errors

    def _build_record(
        self,
        consultant: Consultant,
        data: CreateSkillRecordRequest,
        ctx: AccessContext,
        source: SkillSource,
    ) -> SkillRecord:
        proficiency_input = data.proficiency or ProficiencyInput()
        self_assessment = None
        if proficiency_input.self_assessment is not None:
            sa = proficiency_input.self_assessment
            sa_level = parse_level(sa.level)
            self_assessment = Assessment(
                level=sa_level,
                score=self.engine.resolve_score(sa_level, sa.score),
                assessed_by=ctx.user_id or consultant.id,
                notes=sa.notes,
            )

        experience = data.experience
        goals = data.goals
        with _as_validation_error("Skill validation failed"):
            return SkillRecord(
                tenant_id=consultant.tenant_id,
                consultant_id=consultant.id,
                organization_id=consultant.organization_id,
                skill=SkillInfo(
                    name=data.name,
                    category=SkillCategory(data.category),
                    subcategory=data.subcategory,
                    description=data.description,
                    tags=data.tags,
                    aliases=data.aliases,
                    related_skills=data.related_skills,
                ),
                proficiency=self.engine.initial_proficiency(
                    proficiency_input.level, proficiency_input.score, self_assessment
                ),
                experience=Experience(**experience.model_dump()) if experience else Experience(),
                goals=Goals(
                    target_level=goals.target_level,
                    target_date=goals.target_date,
                    development_plan=goals.development_plan,
                    milestones=[Milestone(**m.model_dump()) for m in goals.milestones],
                )
                if goals
                else Goals(),
                status=RecordStatus(
                    is_primary=data.is_primary, is_featured=data.is_featured
                ),
                metadata=RecordMetadata(
                    source=source, created_by=ctx.user_id, notes=data.notes
                ),
            )

    @monitor_operation("create_skill_record")
    async def create_skill_record(
        self,
        consultant_id: str,
        data: CreateSkillRecordRequest,
        ctx: AccessContext,
        source: SkillSource = SkillSource.MANUAL,
    ) -> SkillRecord:
        """
        Create a skill record for a consultant.

        Args:
            consultant_id: Owning consultant
            data: Skill data; name and category are required
            ctx: Caller context
            source: Where the record came from

        Returns:
            The persisted record

        Raises:
            ValidationError: Missing/invalid fields or skills limit reached
            ConsultantNotFoundError: Unknown consultant
            ForbiddenError: Consultant outside the caller's tenant
            DuplicateSkillError: Consultant already holds the skill
        """
        logger.info(
            "Creating skill record",
            consultant_id=consultant_id,
            skill_name=data.name,
            category=data.category,
        )

        errors = self._validate_create(data)
        if errors:
            raise ValidationError("Skill validation failed", errors=errors)

        consultant = await self.consultants.get(consultant_id)
        if consultant is None:
            raise ConsultantNotFoundError(consultant_id)
        if ctx.enforces_tenant() and consultant.tenant_id != ctx.tenant_id:
            raise ForbiddenError(
                "Access denied to this consultant", {"consultant_id": consultant_id}
            )

        name = data.name.strip()  # type: ignore[union-attr]
        if await self.skill_records.exists_for_consultant(
            consultant.tenant_id, consultant_id, normalize_skill_name(name)
        ):
            raise DuplicateSkillError(name)

        count = await self.skill_records.count_for_consultant(consultant_id)
        if count >= self.config.MAX_SKILLS_PER_CONSULTANT:
            raise ValidationError(
                "Maximum skills limit reached",
                details={"limit": self.config.MAX_SKILLS_PER_CONSULTANT},
            )

        record = self._build_record(consultant, data, ctx, source)
        if record.experience.last_used is None:
            record.experience.last_used = record.created_at
        record = await self.skill_records.add(record)

        await self._run_effects(
            [
                self._sync(record, SyncAction.ADD),
                self._event(
                    record,
                    "skill_record_created",
                    user_id=ctx.user_id,
                    category=record.skill.category.value,
                    level=record.proficiency.level.value,
                ),
            ]
        )

        logger.info(
            "Skill record created",
            skill_record_id=record.record_code,
            consultant_id=consultant_id,
        )
        return record

    @monitor_operation("bulk_create_skill_records")
    async def bulk_create_skill_records(
        self,
        consultant_id: str,
        items: Sequence[CreateSkillRecordRequest],
        ctx: AccessContext,
        source: SkillSource = SkillSource.IMPORT,
    ) -> BulkCreateReport:
        """
        Create records one by one, reporting instead of raising.

        Conflicts are reported as skipped, any other error as failed.
        Records created before a failure stay in place.
        """
        if not items:
            raise ValidationError("Skills array is required")

        report = BulkCreateReport()
        for item in items:
            try:
                record = await self.create_skill_record(consultant_id, item, ctx, source)
            except ConflictError as e:
                report.skipped.append(
                    BulkItemIssue(
                        skill_name=item.name, reason="Duplicate skill", error=e.to_dict()
                    )
                )
            except DomainError as e:
                report.failed.append(
                    BulkItemIssue(skill_name=item.name, reason=e.message, error=e.to_dict())
                )
            except Exception as e:
                logger.warning(
                    "Unexpected error in bulk skill creation",
                    consultant_id=consultant_id,
                    skill_name=item.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                report.failed.append(
                    BulkItemIssue(
                        skill_name=item.name,
                        reason=str(e),
                        error={"type": "internal", "message": str(e), "details": {}},
                    )
                )
            else:
                report.created.append(record)

        logger.info(
            "Bulk skill creation completed",
            consultant_id=consultant_id,
            created=len(report.created),
            skipped=len(report.skipped),
            failed=len(report.failed),
        )
        return report

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @monitor_operation("get_skill_record")
    async def get_skill_record_by_id(
        self, id_or_code: str, ctx: AccessContext, include_deleted: bool = False
    ) -> SkillRecord:
        return await self._load(id_or_code, ctx, include_deleted=include_deleted)

    @monitor_operation("get_consultant_skills")
    async def get_consultant_skills(
        self,
        consultant_id: str,
        ctx: AccessContext,
        query: SkillListQuery | None = None,
    ) -> PaginatedSkillRecords:
        """List a consultant's non-deleted records with filters and pagination."""
        query = query or SkillListQuery()
        category = _parse_optional(SkillCategory, query.category, None, "Invalid skill category")
        level = _parse_optional(ProficiencyLevel, query.level, None, "Invalid proficiency level")

        limit = query.limit if query.limit is not None else self.config.DEFAULT_PAGE_LIMIT
        limit = max(1, min(limit, self.config.MAX_PAGE_LIMIT))
        skip = max(0, query.skip)

        records, total = await self.skill_records.find_for_consultant(
            consultant_id,
            ctx.tenant_id if ctx.enforces_tenant() else None,
            SkillRecordFilter(
                category=category,
                level=level,
                verified=query.verified,
                active_only=query.active_only,
                primary_only=query.primary_only,
            ),
            PageRequest(
                skip=skip, limit=limit, sort_by=query.sort_by, sort_order=query.sort_order
            ),
        )
        return PaginatedSkillRecords(
            data=records,
            pagination=PaginationInfo(
                total=total, limit=limit, skip=skip, has_more=skip + len(records) < total
            ),
        )

    @monitor_operation("search_skills")
    async def search_skills(
        self,
        query: str,
        ctx: AccessContext,
        category: str | None = None,
        min_score: float | None = None,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """Rank the tenant's skill records against a free-text query."""
        terms = search_terms(query or "")
        if not terms:
            raise ValidationError("Search query is required")
        parsed_category = _parse_optional(SkillCategory, category, None, "Invalid skill category")
        tenant_id = ctx.tenant_id or self.config.COMPANY_TENANT_ID

        candidates = await self.skill_records.find_search_candidates(
            tenant_id, terms, parsed_category, min_score
        )
        consultants = await self.consultants.get_many(r.consultant_id for r in candidates)
        hits = self.matcher.search(
            candidates,
            query,
            consultants,
            limit=limit or self.config.DEFAULT_SEARCH_LIMIT,
        )
        logger.info("Skill search completed", query=query, results=len(hits))
        return hits

    @monitor_operation("find_consultants_with_skills")
    async def find_consultants_with_skills(
        self,
        skill_names: Sequence[str],
        ctx: AccessContext,
        min_level: str | None = None,
        verified_only: bool = False,
        limit: int | None = None,
    ) -> list[ConsultantMatch]:
        """Rank consultants by how many of ``skill_names`` they hold."""
        normalized = list(
            dict.fromkeys(normalize_skill_name(n) for n in skill_names if n and n.strip())
        )
        if not normalized:
            raise ValidationError("At least one skill name is required")
        level = parse_level(min_level) if min_level is not None else None

        records = await self.skill_records.find_active(
            tenant_id=ctx.tenant_id if ctx.enforces_tenant() else None,
            normalized_names=normalized,
        )
        consultants = await self.consultants.get_many(r.consultant_id for r in records)
        return self.matcher.find_consultants_with_skills(
            records,
            list(skill_names),
            consultants,
            min_level=level,
            verified_only=verified_only,
            limit=limit or self.config.DEFAULT_SEARCH_LIMIT,
        )

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    @monitor_operation("update_skill_record")
    async def update_skill_record(
        self,
        id_or_code: str,
        data: UpdateSkillRecordRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        """
        Apply the fields explicitly set on ``data``.

        Raises:
            ValidationError: Invalid target level or field values
        """
        if data.goals is not None and data.goals.target_level is not None:
            parse_level(data.goals.target_level)

        changes: list[str] = []

        def apply(record: SkillRecord) -> None:
            with _as_validation_error("Skill update validation failed"):
                for section_name in ("skill", "experience", "goals"):
                    section_update = getattr(data, section_name)
                    if section_name not in data.model_fields_set or section_update is None:
                        continue
                    section = getattr(record, section_name)
                    for field_name in section_update.model_fields_set:
                        value = getattr(section_update, field_name)
                        if field_name == "milestones" and value is not None:
                            value = [Milestone(**m.model_dump()) for m in value]
                        setattr(section, field_name, value)
                        changes.append(f"{section_name}.{field_name}")
                for flag in ("is_primary", "is_featured"):
                    value = getattr(data, flag)
                    if flag in data.model_fields_set and value is not None:
                        setattr(record.status, flag, value)
                        changes.append(f"status.{flag}")

        record, _ = await self._mutate(id_or_code, ctx, apply)

        await self._run_effects(
            [
                self._sync(record, SyncAction.UPDATE),
                self._event(record, "skill_record_updated", user_id=ctx.user_id, changes=changes),
            ]
        )
        logger.info(
            "Skill record updated", skill_record_id=record.record_code, changes=changes
        )
        return record

    @monitor_operation("submit_proficiency_assessment")
    async def submit_proficiency_assessment(
        self,
        id_or_code: str,
        submission: AssessmentSubmission,
        ctx: AccessContext,
    ) -> SkillRecord:
        """
        Record an assessment, update proficiency and advance verification.

        The peer verification threshold is checked against the peer
        assessments stored before this submission.
        """
        assessment_type = parse_assessment_type(submission.type)
        if submission.level is None:
            raise ValidationError("Assessment level is required")
        level = parse_level(submission.level)
        score = self.engine.resolve_score(level, submission.score)

        def apply(record: SkillRecord) -> None:
            at = utc_now()
            prior_peer_count = len(record.proficiency.peer_assessments)
            event = self.engine.apply_assessment(
                record,
                assessment_type,
                level,
                score,
                assessed_by=ctx.user_id,
                notes=submission.notes,
                assessed_at=at,
            )
            self.verification.apply_assessment(
                record, assessment_type, prior_peer_count, ctx.user_id, event, at
            )

        record, _ = await self._mutate(id_or_code, ctx, apply)

        effects: list[SideEffect] = [
            self._sync(record, SyncAction.UPDATE),
            self._event(
                record,
                "proficiency_assessed",
                user_id=ctx.user_id,
                assessment_type=assessment_type.value,
                level=level.value,
                score=score,
            ),
        ]
        if assessment_type != AssessmentType.SELF and ctx.user_id != record.consultant_id:
            consultant = await self._consultant_contact(record.consultant_id)
            if consultant is not None and consultant.email:
                effects.append(
                    SendNotification(
                        to=consultant.email,
                        template="skill_assessment_received",
                        data={
                            "first_name": consultant.first_name,
                            "skill_name": record.skill.name,
                            "assessment_type": assessment_type.value,
                            "new_level": record.proficiency.level.value,
                        },
                    )
                )
        await self._run_effects(effects)

        logger.info(
            "Proficiency assessment submitted",
            skill_record_id=record.record_code,
            assessment_type=assessment_type.value,
            verification_status=record.verification.status.value,
        )
        return record

    @monitor_operation("request_assessment")
    async def request_assessment(
        self,
        id_or_code: str,
        request: AssessmentRequest,
        ctx: AccessContext,
    ) -> AssessmentRequestReceipt:
        """Notify an assessor; the record itself is not changed."""
        record = await self._load(id_or_code, ctx)

        if not request.assessor_id:
            raise ValidationError("Assessor ID is required")
        if request.type not in {t.value for t in REQUESTABLE_ASSESSMENT_TYPES}:
            raise ValidationError(
                "Assessment type must be manager or peer", details={"type": request.type}
            )

        consultant = await self._consultant_contact(record.consultant_id)
        await self._run_effects(
            [
                SendNotification(
                    to=request.assessor_id,
                    template="skill_assessment_request",
                    data={
                        "skill_name": record.skill.name,
                        "consultant_name": consultant.full_name if consultant else "Consultant",
                        "assessment_type": request.type,
                        "message": request.message,
                        "assessment_url": f"{self.config.PLATFORM_URL}/assessments/{record.id}",
                    },
                ),
                self._event(
                    record,
                    "assessment_requested",
                    user_id=ctx.user_id,
                    assessor_id=request.assessor_id,
                    type=request.type,
                ),
            ]
        )

        logger.info(
            "Assessment request sent",
            skill_record_id=record.record_code,
            assessor_id=request.assessor_id,
        )
        return AssessmentRequestReceipt(
            skill_record_id=record.record_code, assessor_id=request.assessor_id
        )

    @monitor_operation("verify_certification")
    async def verify_certification(
        self,
        id_or_code: str,
        request: CertificationRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        """Attach certification details and mark the record certified."""
        if request.score is not None and not 0 <= request.score <= 100:
            raise ValidationError(
                "Score must be between 0 and 100", details={"score": request.score}
            )

        def apply(record: SkillRecord) -> None:
            at = utc_now()
            details = CertificationDetails(
                certified=True,
                certification_id=request.certification_id,
                certification_name=request.certification_name,
                score=request.score,
                earned_at=request.earned_at or at,
            )
            self.verification.certify(record, details, at)
            self.engine.recalculate(record.proficiency)

        record, _ = await self._mutate(id_or_code, ctx, apply)

        await self._run_effects(
            [
                self._sync(record, SyncAction.UPDATE),
                self._event(
                    record,
                    "skill_certified",
                    user_id=ctx.user_id,
                    certification_id=request.certification_id,
                    certification_name=request.certification_name,
                ),
            ]
        )
        logger.info("Skill certification verified", skill_record_id=record.record_code)
        return record

    # ------------------------------------------------------------------
    # Endorsements
    # ------------------------------------------------------------------

    @monitor_operation("add_endorsement")
    async def add_endorsement(
        self,
        id_or_code: str,
        request: EndorsementRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        """
        Endorse a skill record as the acting user.

        Raises:
            ValidationError: Self-endorsement, bad rating or ledger at capacity
            DuplicateEndorsementError: The user already endorsed the record
        """
        if not ctx.user_id:
            raise ValidationError("Endorser is required")
        _check_rating(request.rating)
        endorser_id = ctx.user_id

        current = await self._load(id_or_code, ctx)
        self.endorsements.check_can_endorse(current, endorser_id)

        def apply(record: SkillRecord) -> Endorsement:
            return self.endorsements.add(
                record,
                Endorsement(
                    endorser_id=endorser_id,
                    relationship=request.relationship,
                    comment=request.comment,
                    rating=request.rating,
                    project_context=request.project_context,
                ),
            )

        record, endorsement = await self._mutate(current.id, ctx, apply)

        effects: list[SideEffect] = [
            self._event(
                record,
                "endorsement_added",
                endorser_id=endorser_id,
                endorsement_id=endorsement.id,
                rating=request.rating,
            )
        ]
        consultant = await self._consultant_contact(record.consultant_id)
        if consultant is not None and consultant.email:
            effects.append(
                SendNotification(
                    to=consultant.email,
                    template="skill_endorsement_received",
                    data={
                        "first_name": consultant.first_name,
                        "skill_name": record.skill.name,
                        "endorser_comment": request.comment,
                    },
                )
            )
        await self._run_effects(effects)

        logger.info(
            "Endorsement added",
            skill_record_id=record.record_code,
            endorser_id=endorser_id,
            endorsement_count=len(record.endorsements),
        )
        return record

    @monitor_operation("remove_endorsement")
    async def remove_endorsement(
        self, id_or_code: str, endorsement_id: str, ctx: AccessContext
    ) -> SkillRecord:
        """Remove an endorsement by id; an unknown id leaves the record unchanged."""
        record, removed = await self._mutate(
            id_or_code, ctx, lambda r: self.endorsements.remove(r, endorsement_id)
        )
        if removed is None:
            logger.info(
                "Endorsement not present",
                skill_record_id=record.record_code,
                endorsement_id=endorsement_id,
            )
        else:
            await self._run_effects(
                [
                    self._event(
                        record,
                        "endorsement_removed",
                        user_id=ctx.user_id,
                        endorsement_id=endorsement_id,
                    )
                ]
            )
        return record

    # ------------------------------------------------------------------
    # Project history
    # ------------------------------------------------------------------

    @monitor_operation("add_project_experience")
    async def add_project_experience(
        self,
        id_or_code: str,
        request: ProjectExperienceRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        if not request.project_name or not request.project_name.strip():
            raise ValidationError("Project name is required")
        if request.start_date is None:
            raise ValidationError("Project start date is required")
        application = _parse_optional(
            SkillApplication,
            request.skill_application,
            SkillApplication.PRIMARY,
            "Invalid skill application",
        )
        complexity = _parse_optional(
            ProjectComplexity,
            request.complexity,
            ProjectComplexity.MODERATE,
            "Invalid project complexity",
        )
        feedback = None
        if request.feedback is not None:
            _check_rating(request.feedback.rating)
            feedback = ProjectFeedback(
                rating=request.feedback.rating,
                comment=request.feedback.comment,
                given_by=ctx.user_id,
            )

        with _as_validation_error("Project validation failed"):
            project = ProjectExperience(
                project_ref=request.project_ref,
                project_name=request.project_name.strip(),
                client_name=request.client_name,
                role=request.role,
                start_date=request.start_date,
                end_date=request.end_date,
                hours_logged=request.hours_logged,
                responsibilities=request.responsibilities,
                achievements=request.achievements,
                skill_application=application,
                complexity=complexity,
                feedback=feedback,
            )

        record, project = await self._mutate(
            id_or_code, ctx, lambda r: self.projects.add(r, project)
        )

        await self._run_effects(
            [
                self._sync(record, SyncAction.UPDATE),
                self._event(
                    record,
                    "project_experience_added",
                    user_id=ctx.user_id,
                    project_id=project.project_ref or project.id,
                    project_name=project.project_name,
                ),
            ]
        )
        logger.info(
            "Project experience added",
            skill_record_id=record.record_code,
            total_projects=record.experience.total_projects,
        )
        return record

    @monitor_operation("update_project_feedback")
    async def update_project_feedback(
        self,
        id_or_code: str,
        project_ref_or_id: str,
        request: ProjectFeedbackRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        _check_rating(request.rating)
        feedback = ProjectFeedback(
            rating=request.rating, comment=request.comment, given_by=ctx.user_id
        )
        record, _ = await self._mutate(
            id_or_code,
            ctx,
            lambda r: self.projects.update_feedback(r, project_ref_or_id, feedback),
        )
        logger.info(
            "Project feedback updated",
            skill_record_id=record.record_code,
            project_id=project_ref_or_id,
        )
        return record

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    @monitor_operation("add_completed_course")
    async def add_completed_course(
        self,
        id_or_code: str,
        request: CompletedCourseRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        if not request.course_name or not request.provider:
            raise ValidationError("Course name and provider are required")

        with _as_validation_error("Course validation failed"):
            course = CompletedCourse(
                course_id=request.course_id or generate_course_id(),
                course_name=request.course_name,
                provider=request.provider,
                completed_at=request.completed_at or utc_now(),
                score=request.score,
                duration=request.duration,
                certificate=Certificate(**request.certificate.model_dump())
                if request.certificate
                else None,
            )

        record, course = await self._mutate(
            id_or_code, ctx, lambda r: self.training.add_completed_course(r, course)
        )

        await self._run_effects(
            [
                self._event(
                    record,
                    "course_completed",
                    user_id=ctx.user_id,
                    course_id=course.course_id,
                    course_name=course.course_name,
                )
            ]
        )
        logger.info(
            "Completed course added",
            skill_record_id=record.record_code,
            course_id=course.course_id,
        )
        return record

    @monitor_operation("add_course_enrollment")
    async def add_course_enrollment(
        self,
        id_or_code: str,
        request: CourseEnrollmentRequest,
        ctx: AccessContext,
    ) -> SkillRecord:
        if not request.course_id:
            raise ValidationError("Course ID is required")

        def apply(record: SkillRecord) -> CourseEnrollment:
            if record.training.find_enrollment(request.course_id) is not None:
                raise ConflictError(
                    "Already enrolled in this course", {"course_id": request.course_id}
                )
            return self.training.add_enrollment(
                record,
                CourseEnrollment(
                    course_id=request.course_id,
                    course_name=request.course_name,
                    provider=request.provider,
                    enrolled_at=request.enrolled_at or utc_now(),
                    expected_completion=request.expected_completion,
                    progress=request.progress,
                ),
            )

        record, enrollment = await self._mutate(id_or_code, ctx, apply)

        await self._run_effects(
            [
                self._event(
                    record,
                    "course_enrolled",
                    user_id=ctx.user_id,
                    course_id=enrollment.course_id,
                )
            ]
        )
        return record

    @monitor_operation("update_enrollment_progress")
    async def update_enrollment_progress(
        self,
        id_or_code: str,
        course_id: str,
        progress: float,
        ctx: AccessContext,
    ) -> SkillRecord:
        """
        Update progress on an enrollment.

        Progress of 100 or more completes the course: the enrollment is
        removed and one completed course appended in the same write.
        """
        record, completed = await self._mutate(
            id_or_code,
            ctx,
            lambda r: self.training.update_progress(r, course_id, progress),
        )

        if completed is not None:
            await self._run_effects(
                [
                    self._event(
                        record,
                        "course_completed",
                        user_id=ctx.user_id,
                        course_id=completed.course_id,
                        course_name=completed.course_name,
                    )
                ]
            )
        logger.info(
            "Enrollment progress updated",
            skill_record_id=record.record_code,
            course_id=course_id,
            progress=progress,
            completed=completed is not None,
        )
        return record

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    @monitor_operation("delete_skill_record")
    async def delete_skill_record(
        self, id_or_code: str, ctx: AccessContext, hard_delete: bool = False
    ) -> DeletionResult:
        """
        Soft delete by default; ``hard_delete`` removes the row.

        Hard deletion also purges records that were already soft-deleted.
        """
        already_removed = False
        if hard_delete:
            record = await self._load(id_or_code, ctx, include_deleted=True)
            already_removed = record.status.is_deleted
            if not await self.skill_records.hard_delete(record.id):
                raise SkillRecordNotFoundError(id_or_code)
        else:

            def apply(r: SkillRecord) -> None:
                r.status.is_deleted = True
                r.status.is_active = False
                r.status.deleted_at = utc_now()
                r.status.deleted_by = ctx.user_id

            record, _ = await self._mutate(id_or_code, ctx, apply)

        effects: list[SideEffect] = []
        if not already_removed:
            effects.append(self._sync(record, SyncAction.REMOVE))
        effects.append(
            self._event(
                record,
                "skill_record_deleted",
                user_id=ctx.user_id,
                hard_delete=hard_delete,
            )
        )
        await self._run_effects(effects)
        logger.info(
            "Skill record deleted",
            skill_record_id=record.record_code,
            hard_delete=hard_delete,
        )
        return DeletionResult(
            skill_record_id=record.record_code,
            skill_name=record.skill.name,
            hard_delete=hard_delete,
        )

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def _scope_tenant(self, ctx: AccessContext) -> str:
        return ctx.tenant_id or self.config.COMPANY_TENANT_ID

    @monitor_operation("get_skill_distribution")
    async def get_skill_distribution(
        self, ctx: AccessContext, consultant_id: str | None = None
    ) -> SkillDistribution:
        return await self.skill_records.get_distribution(
            self._scope_tenant(ctx),
            consultant_id=consultant_id,
            top_limit=self.config.TOP_SKILLS_LIMIT,
        )

    @monitor_operation("get_skill_gap_analysis")
    async def get_skill_gap_analysis(
        self,
        consultant_id: str,
        required_skills: Sequence[RequiredSkill],
        ctx: AccessContext,
    ) -> GapAnalysis:
        """
        Compare a consultant's active skills against required skills.

        Unknown or absent target levels fall back to an intermediate threshold.
        """
        records = await self.skill_records.find_active(
            tenant_id=ctx.tenant_id if ctx.enforces_tenant() else None,
            consultant_id=consultant_id,
        )
        analysis = self.gap_analyzer.analyze(consultant_id, records, required_skills)
        logger.info(
            "Skill gap analysis completed",
            consultant_id=consultant_id,
            readiness_score=analysis.readiness_score,
        )
        return analysis

    @monitor_operation("get_organization_skill_matrix")
    async def get_organization_skill_matrix(
        self,
        ctx: AccessContext,
        skills: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> SkillMatrix:
        normalized = (
            [normalize_skill_name(s) for s in skills if s and s.strip()] if skills else None
        )
        records = await self.skill_records.find_active(
            tenant_id=self._scope_tenant(ctx), normalized_names=normalized or None
        )
        consultants = await self.consultants.get_many(r.consultant_id for r in records)
        return self.gap_analyzer.build_matrix(
            records, consultants, limit=limit or self.config.DEFAULT_MATRIX_LIMIT
        )

    @monitor_operation("get_skill_statistics")
    async def get_skill_statistics(
        self, ctx: AccessContext, consultant_id: str | None = None
    ) -> SkillStatistics:
        return await self.skill_records.get_statistics(
            self._scope_tenant(ctx),
            consultant_id=consultant_id,
            recent_limit=self.config.RECENTLY_UPDATED_LIMIT,
        )
