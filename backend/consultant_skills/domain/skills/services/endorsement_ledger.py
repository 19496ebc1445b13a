"""Endorsement ledger: bounded, one-per-endorser list of endorsements."""

from ...shared.exceptions import DuplicateEndorsementError, ValidationError
from ..entities.skill_record import Endorsement, SkillRecord


class EndorsementLedger:
    """Domain service guarding the endorsement list of a skill record."""

    def __init__(self, max_endorsements: int = 50) -> None:
        self.max_endorsements = max_endorsements

    def check_can_endorse(self, record: SkillRecord, endorser_id: str) -> None:
        """
        Raise if the endorser may not endorse this record.

        Raises:
            ValidationError: Self-endorsement or ledger at capacity
            DuplicateEndorsementError: Endorser already endorsed the record
        """
        if endorser_id == record.consultant_id:
            raise ValidationError(
                "Cannot endorse your own skill", details={"endorser_id": endorser_id}
            )
        if record.find_endorsement_by(endorser_id) is not None:
            raise DuplicateEndorsementError(endorser_id)
        if len(record.endorsements) >= self.max_endorsements:
            raise ValidationError(
                "Maximum endorsements limit reached",
                details={"limit": self.max_endorsements},
            )

    def add(self, record: SkillRecord, endorsement: Endorsement) -> Endorsement:
        self.check_can_endorse(record, endorsement.endorser_id)
        record.endorsements = [*record.endorsements, endorsement]
        return endorsement

    @staticmethod
    def remove(record: SkillRecord, endorsement_id: str) -> Endorsement | None:
        """Pull an endorsement by sub-id; an unknown id leaves the list unchanged."""
        removed = None
        remaining = []
        for endorsement in record.endorsements:
            if endorsement.id == endorsement_id:
                removed = endorsement
            else:
                remaining.append(endorsement)
        record.endorsements = remaining
        return removed
