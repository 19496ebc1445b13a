"""
VerificationStateMachine Domain Service

Verification status lifecycle of a skill record:

    not_verified < self_assessed < peer_verified / manager_verified < certified / tested

Transitions only move forward along this lattice. Within the middle tier a
manager verification supersedes a peer verification.
"""

from datetime import datetime

from ...shared.base import utc_now
from ..entities.skill_record import SkillRecord, VerificationEvent
from ..value_objects.enums import AssessmentType, VerificationStatus
from ..value_objects.proficiency import CertificationDetails

# Peer verification requires this many peer assessments already on record
PEER_VERIFICATION_THRESHOLD = 2


class VerificationStateMachine:
    """Domain service for verification status transitions."""

    @staticmethod
    def can_advance(current: VerificationStatus, target: VerificationStatus) -> bool:
        if target.rank > current.rank:
            return True
        return (
            target == VerificationStatus.MANAGER_VERIFIED
            and current == VerificationStatus.PEER_VERIFIED
        )

    @staticmethod
    def target_for_assessment(
        current: VerificationStatus,
        assessment_type: AssessmentType,
        prior_peer_count: int,
    ) -> VerificationStatus | None:
        """
        Status an assessment would move to, before the lattice check.

        Args:
            current: Status before the submission
            assessment_type: Type of the submitted assessment
            prior_peer_count: Peer assessments stored before this submission

        Returns:
            Target status, or None when the submission does not transition
        """
        if assessment_type == AssessmentType.SELF:
            if current == VerificationStatus.NOT_VERIFIED:
                return VerificationStatus.SELF_ASSESSED
            return None
        if assessment_type == AssessmentType.MANAGER:
            return VerificationStatus.MANAGER_VERIFIED
        if assessment_type == AssessmentType.PEER:
            if prior_peer_count >= PEER_VERIFICATION_THRESHOLD:
                return VerificationStatus.PEER_VERIFIED
            return None
        # test and certification submissions only record history
        return None

    @classmethod
    def next_status(
        cls,
        current: VerificationStatus,
        assessment_type: AssessmentType,
        prior_peer_count: int,
    ) -> VerificationStatus:
        target = cls.target_for_assessment(current, assessment_type, prior_peer_count)
        if target is None or not cls.can_advance(current, target):
            return current
        return target

    @classmethod
    def apply_assessment(
        cls,
        record: SkillRecord,
        assessment_type: AssessmentType,
        prior_peer_count: int,
        actor_id: str | None,
        event: VerificationEvent,
        at: datetime | None = None,
    ) -> VerificationStatus:
        """Transition the record's status and append the history event."""
        verification = record.verification
        new_status = cls.next_status(
            verification.status, assessment_type, prior_peer_count
        )
        verification.status = new_status
        # every manager submission re-stamps the verifier unless a higher tier holds
        if (
            assessment_type == AssessmentType.MANAGER
            and new_status == VerificationStatus.MANAGER_VERIFIED
        ):
            verification.verified_by = actor_id
            verification.verified_at = at or utc_now()
        verification.history = [*verification.history, event]
        return verification.status

    @staticmethod
    def certify(
        record: SkillRecord,
        details: CertificationDetails,
        at: datetime | None = None,
    ) -> VerificationEvent:
        """Mark the record certified and attach the certification details."""
        at = at or utc_now()
        record.proficiency.certification_based = details
        verification = record.verification
        verification.status = VerificationStatus.CERTIFIED
        verification.verified_at = at
        event = VerificationEvent(
            type=AssessmentType.CERTIFICATION,
            score=details.score,
            certification_name=details.certification_name,
            assessed_at=at,
        )
        verification.history = [*verification.history, event]
        return event
