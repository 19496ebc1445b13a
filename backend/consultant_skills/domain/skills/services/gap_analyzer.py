"""
GapAnalyzer Domain Service

Compares a consultant's current skills against a required profile, and builds
the organization-wide consultant x skill matrix.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from ..entities.consultant import Consultant
from ..entities.skill_record import SkillRecord
from ..value_objects.analysis import (
    GapAnalysis,
    GapEntry,
    GapSummary,
    MatrixRow,
    MatrixSkill,
    SkillMatrix,
)
from ..value_objects.enums import ProficiencyLevel
from ..value_objects.identifiers import normalize_skill_name

# Threshold used when a requirement has no (or an unknown) target level
DEFAULT_REQUIRED_SCORE = ProficiencyLevel.INTERMEDIATE.score


class SkillRequirement(Protocol):
    name: str
    target_level: str | None


def required_score(target_level: str | None) -> int:
    if target_level is None:
        return DEFAULT_REQUIRED_SCORE
    try:
        return ProficiencyLevel(target_level).score
    except ValueError:
        return DEFAULT_REQUIRED_SCORE


class GapAnalyzer:
    """Domain service for skill-gap analysis and the skill matrix."""

    @staticmethod
    def analyze(
        consultant_id: str,
        records: Iterable[SkillRecord],
        requirements: Sequence[SkillRequirement],
    ) -> GapAnalysis:
        """
        Classify each requirement as a gap, a match or a surplus.

        Args:
            consultant_id: Consultant being analyzed
            records: The consultant's active, non-deleted skill records
            requirements: Required skills with optional target levels

        Returns:
            GapAnalysis with a readiness score of
            ``round((matched + exceeds) / total * 100)``, or 100 when there
            are no requirements
        """
        current = {record.normalized_name: record for record in records}
        gaps: list[GapEntry] = []
        matched: list[GapEntry] = []
        exceeds: list[GapEntry] = []

        for requirement in requirements:
            threshold = required_score(requirement.target_level)
            record = current.get(normalize_skill_name(requirement.name))
            if record is None:
                level, score = ProficiencyLevel.NONE, 0.0
            else:
                level, score = record.proficiency.level, record.proficiency.score

            entry = {
                "skill_name": requirement.name,
                "required_level": requirement.target_level,
                "required_score": threshold,
                "current_level": level,
                "current_score": score,
            }
            if score < threshold:
                gaps.append(GapEntry(**entry, gap=threshold - score))
            elif score > threshold:
                exceeds.append(GapEntry(**entry, surplus=score - threshold))
            else:
                matched.append(GapEntry(**entry))

        total = len(requirements)
        readiness = round((len(matched) + len(exceeds)) / total * 100) if total else 100

        return GapAnalysis(
            consultant_id=consultant_id,
            readiness_score=readiness,
            summary=GapSummary(
                total_required=total,
                matched=len(matched),
                exceeds=len(exceeds),
                gaps=len(gaps),
            ),
            gaps=gaps,
            matched=matched,
            exceeds=exceeds,
        )

    @staticmethod
    def build_matrix(
        records: Iterable[SkillRecord],
        consultants: Mapping[str, Consultant],
        limit: int = 100,
    ) -> SkillMatrix:
        """
        Group records into a consultant x skill matrix.

        The first record seen for a (consultant, normalized name) pair wins.
        Consultants missing from ``consultants`` are dropped; at most
        ``limit`` consultants are returned.
        """
        by_consultant: dict[str, dict[str, MatrixSkill]] = {}
        for record in records:
            skills = by_consultant.setdefault(record.consultant_id, {})
            if record.normalized_name in skills:
                continue
            skills[record.normalized_name] = MatrixSkill(
                name=record.skill.name,
                normalized_name=record.normalized_name,
                level=record.proficiency.level,
                score=record.proficiency.score,
            )

        rows: list[MatrixRow] = []
        columns: dict[str, None] = {}
        for consultant_id, skills in by_consultant.items():
            if len(rows) >= limit:
                break
            consultant = consultants.get(consultant_id)
            if consultant is None:
                continue
            rows.append(
                MatrixRow(consultant=consultant.identity(), skills=list(skills.values()))
            )
            columns.update(dict.fromkeys(skills))

        return SkillMatrix(consultants=rows, skill_columns=list(columns))
