"""
Proficiency Value Objects

Assessments and certification details recorded against a skill record.
"""


from pydantic import Field

from ...shared.base import UtcDateTime, ValueObject, utc_now
from .enums import ProficiencyLevel


class Assessment(ValueObject):
    """A single self, manager or peer assessment of a skill."""

    level: ProficiencyLevel
    score: float = Field(ge=0, le=100)
    assessed_by: str | None = None
    assessed_at: UtcDateTime = Field(default_factory=utc_now)
    notes: str | None = None


class CertificationDetails(ValueObject):
    """Certification attached to a skill by the certification verification."""

    certified: bool = True
    certification_id: str | None = None
    certification_name: str | None = None
    score: float | None = Field(default=None, ge=0, le=100)
    earned_at: UtcDateTime = Field(default_factory=utc_now)
