"""
Integration tests for the SQL skill record and consultant repositories.

Each test runs against a fresh in-memory SQLite database.
"""

import pytest

from consultant_skills.domain.shared.exceptions import (
    DuplicateSkillError,
    SkillRecordNotFoundError,
    ValidationError,
)
from consultant_skills.domain.skills.repositories.skill_record_repository import (
    PageRequest,
    SkillRecordFilter,
)
from consultant_skills.domain.skills.value_objects.enums import (
    ProficiencyLevel,
    SkillCategory,
    VerificationStatus,
)
from consultant_skills.tests.utils.factories import (
    OTHER_TENANT_ID,
    TENANT_ID,
    make_consultant,
    make_record,
)


def _soft_delete(record):
    record.status.is_deleted = True
    record.status.is_active = False


@pytest.mark.asyncio
class TestSkillRecordRepository:
    async def test_add_and_get_by_id_or_code(self, skill_repository):
        record = await skill_repository.add(make_record(name="Python"))

        by_id = await skill_repository.get(record.id)
        by_code = await skill_repository.get(record.record_code.lower())

        assert by_id.skill.name == "Python"
        assert by_code.id == record.id
        assert await skill_repository.get("SKR-UNKNOWN") is None

    async def test_unique_skill_per_consultant(self, skill_repository):
        first = await skill_repository.add(make_record(name="Python", consultant_id="c-1"))

        with pytest.raises(DuplicateSkillError):
            await skill_repository.add(make_record(name=" python ", consultant_id="c-1"))

        # other consultant and other tenant may hold the same skill
        await skill_repository.add(make_record(name="Python", consultant_id="c-2"))
        await skill_repository.add(
            make_record(name="Python", consultant_id="c-1", tenant_id=OTHER_TENANT_ID)
        )

        # a soft-deleted record frees the name
        await skill_repository.mutate(first.id, _soft_delete)
        await skill_repository.add(make_record(name="Python", consultant_id="c-1"))

        assert await skill_repository.count_for_consultant("c-1") == 2

    async def test_soft_deleted_hidden_unless_requested(self, skill_repository):
        record = await skill_repository.add(make_record())
        await skill_repository.mutate(record.id, _soft_delete)

        assert await skill_repository.get(record.id) is None
        deleted = await skill_repository.get(record.id, include_deleted=True)
        assert deleted.status.is_deleted
        with pytest.raises(SkillRecordNotFoundError):
            await skill_repository.mutate(record.id, lambda r: None)

    async def test_mutate_returns_result_and_persists(self, skill_repository):
        record = await skill_repository.add(make_record(level=ProficiencyLevel.BEGINNER))

        def promote(r):
            r.proficiency.level = ProficiencyLevel.EXPERT
            r.proficiency.score = 80
            return "promoted"

        updated, result = await skill_repository.mutate(record.id, promote)
        stored = await skill_repository.get(record.id)

        assert result == "promoted"
        assert updated.proficiency.score == 80
        assert stored.proficiency.level == ProficiencyLevel.EXPERT

    async def test_failed_mutation_leaves_record_unchanged(self, skill_repository):
        record = await skill_repository.add(make_record())

        def broken(r):
            r.proficiency.score = 99
            raise ValidationError("rejected")

        with pytest.raises(ValidationError):
            await skill_repository.mutate(record.id, broken)

        assert (await skill_repository.get(record.id)).proficiency.score == 20

    async def test_find_for_consultant_filters_sorts_and_pages(self, skill_repository):
        levels = [
            ("Python", ProficiencyLevel.EXPERT, SkillCategory.TECHNICAL),
            ("Go", ProficiencyLevel.ADVANCED, SkillCategory.TECHNICAL),
            ("Scrum", ProficiencyLevel.INTERMEDIATE, SkillCategory.METHODOLOGY),
            ("Jira", ProficiencyLevel.BEGINNER, SkillCategory.TOOL),
        ]
        for name, level, category in levels:
            await skill_repository.add(
                make_record(name=name, level=level, category=category, consultant_id="c-1")
            )
        await skill_repository.add(make_record(name="Rust", consultant_id="c-2"))

        page, total = await skill_repository.find_for_consultant(
            "c-1", TENANT_ID, SkillRecordFilter(), PageRequest(skip=1, limit=2)
        )
        assert total == 4
        assert [r.skill.name for r in page] == ["Go", "Scrum"]

        technical, total = await skill_repository.find_for_consultant(
            "c-1",
            None,
            SkillRecordFilter(category=SkillCategory.TECHNICAL),
            PageRequest(sort_by="name", sort_order="asc"),
        )
        assert total == 2
        assert [r.skill.name for r in technical] == ["Go", "Python"]

        other_tenant, total = await skill_repository.find_for_consultant(
            "c-1", OTHER_TENANT_ID, SkillRecordFilter(), PageRequest()
        )
        assert other_tenant == [] and total == 0

    async def test_verified_filter(self, skill_repository):
        verified = make_record(name="Python", consultant_id="c-1")
        verified.verification.status = VerificationStatus.MANAGER_VERIFIED
        self_assessed = make_record(name="Go", consultant_id="c-1")
        self_assessed.verification.status = VerificationStatus.SELF_ASSESSED
        await skill_repository.add(verified)
        await skill_repository.add(self_assessed)

        page, total = await skill_repository.find_for_consultant(
            "c-1", TENANT_ID, SkillRecordFilter(verified=True), PageRequest()
        )

        assert total == 1
        assert page[0].id == verified.id

    async def test_search_candidates_match_terms(self, skill_repository):
        await skill_repository.add(
            make_record(name="Kubernetes", tags=["containers"], level=ProficiencyLevel.EXPERT)
        )
        await skill_repository.add(make_record(name="Docker", description="Containers"))
        await skill_repository.add(make_record(name="Excel", category=SkillCategory.TOOL))
        await skill_repository.add(
            make_record(name="Podman", tags=["containers"], tenant_id=OTHER_TENANT_ID)
        )

        found = await skill_repository.find_search_candidates(TENANT_ID, ["containers"])
        assert {r.skill.name for r in found} == {"Kubernetes", "Docker"}

        strong = await skill_repository.find_search_candidates(
            TENANT_ID, ["containers"], min_score=60
        )
        assert [r.skill.name for r in strong] == ["Kubernetes"]

    async def test_find_active_by_names(self, skill_repository):
        await skill_repository.add(make_record(name="Python", consultant_id="c-1"))
        inactive = make_record(name="Go", consultant_id="c-1")
        inactive.status.is_active = False
        await skill_repository.add(inactive)
        await skill_repository.add(make_record(name="Java", consultant_id="c-2"))

        found = await skill_repository.find_active(
            tenant_id=TENANT_ID, normalized_names=["python", "go", "java"]
        )

        assert [r.skill.name for r in found] == ["Python", "Java"]

    async def test_statistics_and_distribution(self, skill_repository):
        await skill_repository.add(
            make_record(name="Python", consultant_id="c-1", level=ProficiencyLevel.EXPERT)
        )
        await skill_repository.add(
            make_record(name="Python", consultant_id="c-2", level=ProficiencyLevel.ADVANCED)
        )
        await skill_repository.add(
            make_record(
                name="Scrum",
                consultant_id="c-1",
                category=SkillCategory.METHODOLOGY,
                level=ProficiencyLevel.INTERMEDIATE,
            )
        )
        deleted = await skill_repository.add(make_record(name="Cobol", consultant_id="c-3"))
        await skill_repository.mutate(deleted.id, _soft_delete)

        stats = await skill_repository.get_statistics(TENANT_ID)
        assert stats.total == 3
        assert stats.by_category[0].category == SkillCategory.TECHNICAL
        assert stats.by_category[0].count == 2
        assert stats.by_category[0].avg_score == 70
        assert stats.averages.avg_score == 60
        assert {b.status for b in stats.by_verification} == {VerificationStatus.NOT_VERIFIED}
        assert len(stats.recently_updated) == 3

        scoped = await skill_repository.get_statistics(TENANT_ID, consultant_id="c-1")
        assert scoped.total == 2

        distribution = await skill_repository.get_distribution(TENANT_ID)
        assert distribution.top_skills[0].normalized_name == "python"
        assert distribution.top_skills[0].count == 2
        assert [b.level for b in distribution.by_level] == [
            ProficiencyLevel.INTERMEDIATE,
            ProficiencyLevel.ADVANCED,
            ProficiencyLevel.EXPERT,
        ]

    async def test_hard_delete(self, skill_repository):
        record = await skill_repository.add(make_record())

        assert await skill_repository.hard_delete(record.id) is True
        assert await skill_repository.get(record.id, include_deleted=True) is None
        assert await skill_repository.hard_delete(record.id) is False


@pytest.mark.asyncio
class TestConsultantRepository:
    async def test_get_and_get_many(self, consultant_repository):
        first = await consultant_repository.add(make_consultant(first_name="Ann"))
        second = await consultant_repository.add(make_consultant(first_name="Bob"))

        assert (await consultant_repository.get(first.id)).first_name == "Ann"
        assert await consultant_repository.get("missing") is None
        found = await consultant_repository.get_many([first.id, second.id, "missing", first.id])
        assert set(found) == {first.id, second.id}
        assert await consultant_repository.get_many([]) == {}

    async def test_skill_summary_push_set_pull(self, consultant_repository):
        consultant = await consultant_repository.add(make_consultant())
        record = make_record(consultant_id=consultant.id)
        summary = record.to_summary()

        assert await consultant_repository.push_skill(consultant.id, summary)
        # pushing again replaces the entry instead of duplicating it
        assert await consultant_repository.push_skill(consultant.id, summary)
        stored = await consultant_repository.get(consultant.id)
        assert [s.skill_id for s in stored.skills] == [record.id]

        record.proficiency.level = ProficiencyLevel.MASTER
        assert await consultant_repository.set_skill(consultant.id, record.to_summary())
        stored = await consultant_repository.get(consultant.id)
        assert stored.find_skill(record.id).proficiency_level == ProficiencyLevel.MASTER

        assert await consultant_repository.pull_skill(consultant.id, record.id)
        assert not await consultant_repository.pull_skill(consultant.id, record.id)
        assert (await consultant_repository.get(consultant.id)).skills == []

    async def test_set_skill_without_entry_is_noop(self, consultant_repository):
        consultant = await consultant_repository.add(make_consultant())
        summary = make_record(consultant_id=consultant.id).to_summary()

        assert not await consultant_repository.set_skill(consultant.id, summary)
        assert not await consultant_repository.push_skill("missing", summary)
