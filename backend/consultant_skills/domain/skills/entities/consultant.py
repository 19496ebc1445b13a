"""
Consultant collaborator.

The consultant profile is owned elsewhere; this engine reads its identity and
maintains only the denormalized skill list embedded in it.
"""

from pydantic import Field

from ...shared.base import DomainModel
from ..value_objects.analysis import ConsultantIdentity
from ..value_objects.identifiers import generate_object_id
from .skill_record import ConsultantSkillSummary


class Consultant(DomainModel):
    id: str = Field(default_factory=generate_object_id)
    tenant_id: str
    organization_id: str | None = None
    consultant_code: str
    first_name: str
    last_name: str
    email: str | None = None
    level: str | None = None
    department: str | None = None
    availability_status: str | None = None
    skills: list[ConsultantSkillSummary] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def identity(self) -> ConsultantIdentity:
        return ConsultantIdentity(
            id=self.id,
            consultant_code=self.consultant_code,
            first_name=self.first_name,
            last_name=self.last_name,
            level=self.level,
            department=self.department,
            availability_status=self.availability_status,
        )

    def find_skill(self, skill_id: str) -> ConsultantSkillSummary | None:
        for summary in self.skills:
            if summary.skill_id == skill_id:
                return summary
        return None
