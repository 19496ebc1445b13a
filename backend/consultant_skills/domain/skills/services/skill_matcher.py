"""
SkillMatcher Domain Service

Read-only matching across consultants: text search over skill records and
ranking consultants against a list of required skill names.
"""

from collections.abc import Iterable, Mapping

from ..entities.consultant import Consultant
from ..entities.skill_record import SkillRecord
from ..value_objects.analysis import ConsultantMatch, MatchedSkill, SearchHit
from ..value_objects.enums import ProficiencyLevel
from ..value_objects.identifiers import normalize_skill_name

# Relevance weights for text search
EXACT_NAME_WEIGHT = 10.0
NAME_TERM_WEIGHT = 3.0
TAG_TERM_WEIGHT = 2.0
DESCRIPTION_TERM_WEIGHT = 1.0


def search_terms(query: str) -> list[str]:
    return [term for term in query.lower().split() if term]


class SkillMatcher:
    """Domain service for matching consultants by skills."""

    @staticmethod
    def relevance(record: SkillRecord, query: str) -> float:
        """
        Term-weighted text relevance of a record for a query.

        An exact normalized-name match scores highest, then terms found in the
        name, in tags or aliases, and in the description.
        """
        skill = record.skill
        score = 0.0
        if skill.normalized_name == normalize_skill_name(query):
            score += EXACT_NAME_WEIGHT

        labels = [t.lower() for t in (*skill.tags, *skill.aliases)]
        description = (skill.description or "").lower()
        for term in search_terms(query):
            if term in skill.normalized_name:
                score += NAME_TERM_WEIGHT
            if any(term in label for label in labels):
                score += TAG_TERM_WEIGHT
            if term in description:
                score += DESCRIPTION_TERM_WEIGHT
        return score

    @staticmethod
    def search(
        records: Iterable[SkillRecord],
        query: str,
        consultants: Mapping[str, Consultant],
        limit: int = 50,
    ) -> list[SearchHit]:
        """
        Rank records by relevance for a query.

        Args:
            records: Candidate records, already scoped and filtered
            query: Free-text search query
            consultants: Consultants by id; records whose consultant is
                missing are dropped
            limit: Maximum number of hits

        Returns:
            Hits ordered by relevance, then proficiency score, descending
        """
        scored: list[tuple[float, SkillRecord]] = []
        for record in records:
            relevance = SkillMatcher.relevance(record, query)
            if relevance > 0 and record.consultant_id in consultants:
                scored.append((relevance, record))

        scored.sort(key=lambda item: (item[0], item[1].proficiency.score), reverse=True)

        return [
            SearchHit(
                skill_record_id=record.id,
                record_code=record.record_code,
                consultant_id=record.consultant_id,
                name=record.skill.name,
                category=record.skill.category,
                level=record.proficiency.level,
                score=record.proficiency.score,
                relevance=relevance,
                consultant=consultants[record.consultant_id].identity(),
            )
            for relevance, record in scored[:limit]
        ]

    @staticmethod
    def find_consultants_with_skills(
        records: Iterable[SkillRecord],
        skill_names: list[str],
        consultants: Mapping[str, Consultant],
        min_level: ProficiencyLevel | None = None,
        verified_only: bool = False,
        limit: int = 50,
    ) -> list[ConsultantMatch]:
        """
        Rank consultants by how many of the required skills they hold.

        Only active, non-deleted records whose normalized name is required
        count. Consultants are ordered by match count, then average score,
        both descending.
        """
        required = {normalize_skill_name(name) for name in skill_names if name.strip()}
        if not required:
            return []
        min_score = min_level.score if min_level is not None else 0

        grouped: dict[str, list[SkillRecord]] = {}
        for record in records:
            if record.normalized_name not in required:
                continue
            if record.status.is_deleted or not record.status.is_active:
                continue
            if record.proficiency.score < min_score:
                continue
            if verified_only and not record.verification.status.is_verified:
                continue
            grouped.setdefault(record.consultant_id, []).append(record)

        ranked = []
        for consultant_id, matched in grouped.items():
            avg_score = sum(r.proficiency.score for r in matched) / len(matched)
            ranked.append((len(matched), avg_score, consultant_id, matched))
        ranked.sort(key=lambda item: (item[0], item[1]), reverse=True)

        matches = []
        for match_count, avg_score, consultant_id, matched in ranked:
            consultant = consultants.get(consultant_id)
            if consultant is None:
                continue
            matches.append(
                ConsultantMatch(
                    consultant_id=consultant_id,
                    consultant=consultant.identity(),
                    matched_skills=[
                        MatchedSkill(
                            name=r.skill.name,
                            level=r.proficiency.level,
                            score=r.proficiency.score,
                        )
                        for r in matched
                    ],
                    match_count=match_count,
                    match_percentage=round(match_count / len(required) * 100),
                    avg_score=round(avg_score),
                )
            )
            if len(matches) >= limit:
                break
        return matches
