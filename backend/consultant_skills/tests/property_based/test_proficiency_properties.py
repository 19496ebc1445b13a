"""
Property-Based Testing for proficiency scoring and verification

Uses Hypothesis to explore score bands, weighted aggregation, the
verification lattice and the bounded ledgers over generated inputs.
"""

import pytest
from hypothesis import given, settings, strategies as st

from consultant_skills.domain.shared.exceptions import DomainError
from consultant_skills.domain.skills.entities.skill_record import (
    Endorsement,
    Proficiency,
)
from consultant_skills.domain.skills.services.endorsement_ledger import EndorsementLedger
from consultant_skills.domain.skills.services.proficiency_engine import ProficiencyEngine
from consultant_skills.domain.skills.services.verification_state_machine import (
    VerificationStateMachine,
)
from consultant_skills.domain.skills.value_objects.enums import (
    AssessmentType,
    ProficiencyLevel,
    VerificationStatus,
)
from consultant_skills.domain.skills.value_objects.proficiency import (
    Assessment,
    CertificationDetails,
)
from consultant_skills.tests.utils.factories import make_record

scores = st.floats(min_value=0, max_value=100, allow_nan=False)
levels = st.sampled_from(list(ProficiencyLevel))


@st.composite
def assessments(draw):
    """Generate an assessment with a score independent of its level."""
    return Assessment(level=draw(levels), score=draw(scores), assessed_by="assessor")


@st.composite
def proficiencies(draw):
    """Generate a proficiency block with any combination of inputs present."""
    certification = draw(
        st.none()
        | st.builds(
            CertificationDetails,
            certified=st.booleans(),
            score=st.none() | scores,
        )
    )
    return Proficiency(
        level=draw(levels),
        score=draw(scores),
        self_assessment=draw(st.none() | assessments()),
        manager_assessment=draw(st.none() | assessments()),
        peer_assessments=draw(st.lists(assessments(), max_size=5)),
        certification_based=certification,
    )


class TestLevelScoreProperties:
    @given(level=levels)
    def test_canonical_score_falls_in_its_own_band(self, level):
        assert ProficiencyLevel.from_score(level.score) == level

    @given(a=scores, b=scores)
    def test_from_score_is_monotonic(self, a, b):
        low, high = sorted((a, b))
        assert ProficiencyLevel.from_score(low) <= ProficiencyLevel.from_score(high)

    @given(level=levels, score=st.none() | scores)
    def test_resolved_score_in_range(self, level, score):
        resolved = ProficiencyEngine.resolve_score(level, score)

        assert 0 <= resolved <= 100
        if score is None:
            assert resolved == level.score


class TestWeightedScoreProperties:
    @given(proficiency=proficiencies())
    @settings(max_examples=200)
    def test_weighted_score_stays_in_range(self, proficiency):
        engine = ProficiencyEngine("weighted")

        weighted = engine.weighted_score(proficiency)

        if weighted is not None:
            assert weighted == pytest.approx(min(max(weighted, 0), 100))

    @given(proficiency=proficiencies())
    def test_recalculated_level_matches_score_band(self, proficiency):
        engine = ProficiencyEngine("weighted")
        weighted = engine.weighted_score(proficiency)
        before = (proficiency.level, proficiency.score)

        engine.recalculate(proficiency)

        if weighted is None:
            assert (proficiency.level, proficiency.score) == before
        else:
            assert proficiency.level == ProficiencyLevel.from_score(weighted)
            assert proficiency.score == round(weighted)

    @given(proficiency=proficiencies())
    def test_latest_mode_never_recalculates(self, proficiency):
        before = (proficiency.level, proficiency.score)

        ProficiencyEngine("latest").recalculate(proficiency)

        assert (proficiency.level, proficiency.score) == before


class TestVerificationLatticeProperties:
    @given(
        current=st.sampled_from(list(VerificationStatus)),
        assessment_type=st.sampled_from(list(AssessmentType)),
        prior_peer_count=st.integers(min_value=0, max_value=10),
    )
    def test_status_rank_never_decreases(self, current, assessment_type, prior_peer_count):
        new = VerificationStateMachine.next_status(
            current, assessment_type, prior_peer_count
        )

        assert new.rank >= current.rank

    @given(
        submissions=st.lists(
            st.sampled_from([AssessmentType.SELF, AssessmentType.MANAGER, AssessmentType.PEER]),
            max_size=12,
        )
    )
    def test_sequence_of_submissions_is_monotonic(self, submissions):
        status = VerificationStatus.NOT_VERIFIED
        peer_count = 0
        for assessment_type in submissions:
            new = VerificationStateMachine.next_status(status, assessment_type, peer_count)
            assert new.rank >= status.rank
            status = new
            if assessment_type == AssessmentType.PEER:
                peer_count += 1

        if AssessmentType.MANAGER in submissions:
            assert status == VerificationStatus.MANAGER_VERIFIED


class TestEndorsementLedgerProperties:
    @given(endorsers=st.lists(st.sampled_from([f"user-{i}" for i in range(8)]), max_size=20))
    @settings(max_examples=100)
    def test_capacity_and_uniqueness_hold(self, endorsers):
        ledger = EndorsementLedger(max_endorsements=5)
        record = make_record()

        for endorser_id in endorsers:
            try:
                ledger.add(record, Endorsement(endorser_id=endorser_id))
            except DomainError:
                pass

        ids = [e.endorser_id for e in record.endorsements]
        assert len(ids) <= 5
        assert len(ids) == len(set(ids))
        assert len(ids) == min(5, len(set(endorsers)))


@pytest.mark.slow
class TestPeerThresholdProperty:
    @given(peer_count=st.integers(min_value=0, max_value=20))
    def test_peer_verification_needs_two_prior_assessments(self, peer_count):
        new = VerificationStateMachine.next_status(
            VerificationStatus.NOT_VERIFIED, AssessmentType.PEER, peer_count
        )

        expected = (
            VerificationStatus.PEER_VERIFIED if peer_count >= 2 else VerificationStatus.NOT_VERIFIED
        )
        assert new == expected
