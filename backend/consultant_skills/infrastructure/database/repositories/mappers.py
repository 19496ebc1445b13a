"""
Mappers between domain aggregates and database rows.
"""

from ....domain.skills.entities.consultant import Consultant
from ....domain.skills.entities.skill_record import SkillRecord
from ..models import ConsultantRow, SkillRecordRow


def build_search_text(record: SkillRecord) -> str:
    """Lower-cased text searched by the cross-consultant skill search."""
    skill = record.skill
    parts = [skill.normalized_name, *skill.tags, *skill.aliases]
    if skill.description:
        parts.append(skill.description)
    return " ".join(part.lower() for part in parts)


def apply_record_to_row(record: SkillRecord, row: SkillRecordRow) -> SkillRecordRow:
    """Copy the aggregate onto a row, refreshing the derived columns."""
    row.id = record.id
    row.record_code = record.record_code
    row.tenant_id = record.tenant_id
    row.consultant_id = record.consultant_id
    row.organization_id = record.organization_id
    row.name = record.skill.name
    row.normalized_name = record.normalized_name
    row.category = record.skill.category.value
    row.level = record.proficiency.level.value
    row.level_rank = record.proficiency.level.rank
    row.score = record.proficiency.score
    row.verification_status = record.verification.status.value
    row.status_current = record.status.current.value
    row.is_active = record.status.is_active
    row.is_deleted = record.status.is_deleted
    row.is_primary = record.status.is_primary
    row.years_of_experience = record.experience.years_of_experience
    row.search_text = build_search_text(record)
    row.created_at = record.created_at
    row.updated_at = record.updated_at
    row.document = record.to_document()
    return row


def skill_record_to_row(record: SkillRecord) -> SkillRecordRow:
    return apply_record_to_row(
        record,
        SkillRecordRow(
            id=record.id,
            record_code=record.record_code,
            tenant_id=record.tenant_id,
            consultant_id=record.consultant_id,
            name=record.skill.name,
            normalized_name=record.normalized_name,
            category=record.skill.category.value,
            level=record.proficiency.level.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
            document={},
        ),
    )


def row_to_skill_record(row: SkillRecordRow) -> SkillRecord:
    return SkillRecord.from_document(row.document)


def consultant_to_row(consultant: Consultant) -> ConsultantRow:
    return ConsultantRow(
        id=consultant.id,
        tenant_id=consultant.tenant_id,
        organization_id=consultant.organization_id,
        consultant_code=consultant.consultant_code,
        first_name=consultant.first_name,
        last_name=consultant.last_name,
        email=consultant.email,
        level=consultant.level,
        department=consultant.department,
        availability_status=consultant.availability_status,
        skills=[s.model_dump(mode="json") for s in consultant.skills],
    )


def row_to_consultant(row: ConsultantRow) -> Consultant:
    return Consultant(
        id=row.id,
        tenant_id=row.tenant_id,
        organization_id=row.organization_id,
        consultant_code=row.consultant_code,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        level=row.level,
        department=row.department,
        availability_status=row.availability_status,
        skills=row.skills or [],
    )
