"""
ProficiencyEngine Domain Service

Computes and updates a skill record's current proficiency from assessment
submissions. Two scoring modes are supported:

- ``latest``: the most recent submission sets level and score directly.
- ``weighted``: the score is the weighted aggregate of the stored self,
  manager, peer and certification inputs and the level is derived from it.
"""

from datetime import datetime
from typing import Literal

from ...shared.base import utc_now
from ...shared.exceptions import ValidationError
from ..entities.skill_record import Proficiency, SkillRecord, VerificationEvent
from ..value_objects.enums import AssessmentType, ProficiencyLevel
from ..value_objects.proficiency import Assessment

ScoringMode = Literal["latest", "weighted"]

DEFAULT_WEIGHTS: dict[str, float] = {
    "self": 0.2,
    "manager": 0.4,
    "peer": 0.3,
    "certification": 0.3,
}

# Score credited to a certification that carries no score of its own
DEFAULT_CERTIFICATION_SCORE = 80


def parse_level(value: ProficiencyLevel | str | None) -> ProficiencyLevel:
    """Coerce a raw level into the enumeration, raising ValidationError."""
    if isinstance(value, ProficiencyLevel):
        return value
    try:
        return ProficiencyLevel(value)
    except ValueError:
        raise ValidationError(
            "Invalid proficiency level", details={"level": str(value)}
        ) from None


def parse_assessment_type(value: AssessmentType | str | None) -> AssessmentType:
    if isinstance(value, AssessmentType):
        return value
    try:
        return AssessmentType(value)
    except ValueError:
        raise ValidationError(
            "Invalid assessment type", details={"type": str(value)}
        ) from None


class ProficiencyEngine:
    """Domain service for proficiency scoring."""

    def __init__(
        self,
        scoring_mode: ScoringMode = "latest",
        weights: dict[str, float] | None = None,
    ) -> None:
        if scoring_mode not in ("latest", "weighted"):
            raise ValueError(f"Unknown scoring mode: {scoring_mode}")
        self.scoring_mode = scoring_mode
        self.weights = {**DEFAULT_WEIGHTS, **(weights or {})}

    @staticmethod
    def canonical_score(level: ProficiencyLevel) -> int:
        return level.score

    @staticmethod
    def resolve_score(level: ProficiencyLevel, score: float | None = None) -> float:
        """
        Resolve the score for a submission.

        Args:
            level: Submitted proficiency level
            score: Explicit score, or None to use the canonical mapping

        Returns:
            Score in [0, 100]

        Raises:
            ValidationError: If an explicit score falls outside [0, 100]
        """
        if score is None:
            return level.score
        if not 0 <= score <= 100:
            raise ValidationError(
                "Score must be between 0 and 100", details={"score": score}
            )
        return score

    def initial_proficiency(
        self,
        level: ProficiencyLevel | str | None = None,
        score: float | None = None,
        self_assessment: Assessment | None = None,
    ) -> Proficiency:
        """Build the proficiency block for a new record (default level beginner)."""
        resolved_level = (
            ProficiencyLevel.BEGINNER if level is None else parse_level(level)
        )
        return Proficiency(
            level=resolved_level,
            score=self.resolve_score(resolved_level, score),
            self_assessment=self_assessment,
        )

    def weighted_score(self, proficiency: Proficiency) -> float | None:
        """
        Weighted aggregate of the stored assessment inputs.

        Each present input contributes its score times its weight; the sum is
        normalized by the total weight of the inputs present. Returns None
        when no input is present.
        """
        parts: list[tuple[float, float]] = []

        if proficiency.self_assessment is not None:
            parts.append((proficiency.self_assessment.score, self.weights["self"]))
        if proficiency.manager_assessment is not None:
            parts.append(
                (proficiency.manager_assessment.score, self.weights["manager"])
            )
        if proficiency.peer_assessments:
            peer_mean = sum(p.score for p in proficiency.peer_assessments) / len(
                proficiency.peer_assessments
            )
            parts.append((peer_mean, self.weights["peer"]))
        certification = proficiency.certification_based
        if certification is not None and certification.certified:
            cert_score = (
                certification.score
                if certification.score is not None
                else DEFAULT_CERTIFICATION_SCORE
            )
            parts.append((cert_score, self.weights["certification"]))

        total_weight = sum(weight for _, weight in parts)
        if not parts or total_weight <= 0:
            return None
        return sum(value * weight for value, weight in parts) / total_weight

    def recalculate(self, proficiency: Proficiency) -> None:
        """Recompute level and score in weighted mode; no-op in latest mode."""
        if self.scoring_mode != "weighted":
            return
        weighted = self.weighted_score(proficiency)
        if weighted is None:
            return
        proficiency.score = round(weighted)
        proficiency.level = ProficiencyLevel.from_score(weighted)

    def apply_assessment(
        self,
        record: SkillRecord,
        assessment_type: AssessmentType,
        level: ProficiencyLevel,
        score: float,
        assessed_by: str | None,
        notes: str | None = None,
        assessed_at: datetime | None = None,
    ) -> VerificationEvent:
        """
        Store an assessment in its slot and update current proficiency.

        Returns the history event to append; the caller appends it after the
        verification transition has inspected the pre-update peer count.
        """
        assessed_at = assessed_at or utc_now()
        assessment = Assessment(
            level=level,
            score=score,
            assessed_by=assessed_by,
            assessed_at=assessed_at,
            notes=notes,
        )
        proficiency = record.proficiency

        if assessment_type == AssessmentType.SELF:
            proficiency.self_assessment = assessment
        elif assessment_type == AssessmentType.MANAGER:
            proficiency.manager_assessment = assessment
        elif assessment_type == AssessmentType.PEER:
            proficiency.peer_assessments = [*proficiency.peer_assessments, assessment]

        proficiency.level = level
        proficiency.score = score
        self.recalculate(proficiency)

        return VerificationEvent(
            type=assessment_type,
            assessed_by=assessed_by,
            level=level,
            score=score,
            assessed_at=assessed_at,
            notes=notes,
        )
