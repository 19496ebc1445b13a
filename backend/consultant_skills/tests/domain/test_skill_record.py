"""
Tests for the SkillRecord aggregate and its nested models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from consultant_skills.domain.skills.entities.skill_record import (
    Endorsement,
    ProjectExperience,
    SkillInfo,
)
from consultant_skills.domain.skills.value_objects.enums import (
    ProficiencyLevel,
    SkillCategory,
    VerificationStatus,
)
from consultant_skills.domain.skills.value_objects.identifiers import (
    generate_course_id,
    generate_record_code,
    is_object_id,
    normalize_skill_name,
    to_base36,
)
from consultant_skills.tests.utils.factories import make_consultant, make_record


class TestIdentifiers:
    def test_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "Z"
        assert to_base36(36) == "10"
        with pytest.raises(ValueError):
            to_base36(-1)

    def test_record_code_format(self):
        code = generate_record_code(now_ms=36**3)

        assert code.startswith("SKR-1000")
        assert len(code) == len("SKR-1000") + 6
        assert code == code.upper()

    def test_course_id(self):
        assert generate_course_id(now_ms=1700000000000) == "CRS-1700000000000"

    def test_object_id(self):
        record = make_record()
        assert is_object_id(record.id)
        assert not is_object_id(record.record_code)

    def test_normalize_skill_name(self):
        assert normalize_skill_name("  PyThOn ") == "python"


class TestSkillInfo:
    def test_normalized_name_derived(self):
        info = SkillInfo(name="  Machine Learning ", category=SkillCategory.TECHNICAL)

        assert info.name == "Machine Learning"
        assert info.normalized_name == "machine learning"

    def test_blank_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            SkillInfo(name="   ", category=SkillCategory.TECHNICAL)

    def test_stored_normalized_name_is_recomputed(self):
        info = SkillInfo.model_validate(
            {"name": "Go", "normalized_name": "stale", "category": "technical"}
        )
        assert info.normalized_name == "go"


class TestSkillRecord:
    def test_defaults(self):
        record = make_record()

        assert record.record_code.startswith("SKR-")
        assert record.verification.status == VerificationStatus.NOT_VERIFIED
        assert not record.is_verified
        assert record.status.is_active
        assert not record.status.is_deleted

    def test_naive_datetimes_treated_as_utc(self):
        project = ProjectExperience(
            project_name="Legacy", start_date=datetime(2022, 5, 1, 9, 30)
        )
        assert project.start_date.tzinfo == timezone.utc

    def test_rating_bounds(self):
        with pytest.raises(PydanticValidationError):
            Endorsement(endorser_id="e-1", rating=6)

    def test_document_round_trip_preserves_state(self):
        record = make_record(name="Terraform", level=ProficiencyLevel.ADVANCED)
        record.endorsements = [Endorsement(endorser_id="e-1", rating=5)]
        record.verification.status = VerificationStatus.PEER_VERIFIED

        restored = type(record).from_document(record.to_document())

        assert restored.to_document() == record.to_document()
        assert restored.endorsements[0].endorsed_at == record.endorsements[0].endorsed_at
        assert restored.verification.status == VerificationStatus.PEER_VERIFIED

    def test_summary_projection(self):
        record = make_record(name="Go", level=ProficiencyLevel.EXPERT)
        record.verification.status = VerificationStatus.SELF_ASSESSED

        summary = record.to_summary()

        assert summary.skill_id == record.id
        assert summary.proficiency_level == ProficiencyLevel.EXPERT
        assert summary.verified is True

    def test_touch_stamps_user(self):
        record = make_record()
        before = record.updated_at

        record.touch("user-9")

        assert record.metadata.updated_by == "user-9"
        assert record.updated_at >= before


class TestConsultant:
    def test_identity_and_lookup(self):
        consultant = make_consultant(first_name="Ada", last_name="Lovelace")
        summary = make_record(consultant_id=consultant.id).to_summary()
        consultant.skills = [summary]

        assert consultant.full_name == "Ada Lovelace"
        assert consultant.identity().id == consultant.id
        assert consultant.find_skill(summary.skill_id) == summary
        assert consultant.find_skill("missing") is None
