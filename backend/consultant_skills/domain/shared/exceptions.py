"""
Domain Exceptions

Error taxonomy for the skill engine. Each exception carries an ErrorType
discriminator so transport layers can map errors to responses without
inspecting exception classes.
"""

from enum import Enum

DetailValue = str | int | float | bool | None | list[str]


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    REPOSITORY = "repository"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    @property
    def code(self) -> str:
        return self.error_type.value.upper()

    def to_dict(self) -> dict[str, str | dict[str, DetailValue]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised for malformed input, enum violations and exceeded limits."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        details = dict(details or {})
        if errors:
            details["errors"] = errors
        super().__init__(message, ErrorType.VALIDATION, details)
        self.errors = errors or []


class NotFoundError(DomainError):
    """Raised when a record, consultant or sub-entity does not exist."""

    def __init__(
        self, message: str, details: dict[str, DetailValue] | None = None
    ) -> None:
        super().__init__(message, ErrorType.NOT_FOUND, details)


class ForbiddenError(DomainError):
    """Raised when the caller's tenant does not own the target."""

    def __init__(
        self, message: str, details: dict[str, DetailValue] | None = None
    ) -> None:
        super().__init__(message, ErrorType.FORBIDDEN, details)


class ConflictError(DomainError):
    """Raised for duplicate skill names and duplicate endorsements."""

    def __init__(
        self, message: str, details: dict[str, DetailValue] | None = None
    ) -> None:
        super().__init__(message, ErrorType.CONFLICT, details)


class RepositoryError(DomainError):
    """Raised when the store fails for reasons other than a constraint."""

    def __init__(
        self, message: str, details: dict[str, DetailValue] | None = None
    ) -> None:
        super().__init__(message, ErrorType.REPOSITORY, details)


class SkillRecordNotFoundError(NotFoundError):
    """Raised when a skill record lookup by id or code fails."""

    def __init__(self, skill_record_id: str) -> None:
        super().__init__(
            "Skill record not found", {"skill_record_id": skill_record_id}
        )
        self.skill_record_id = skill_record_id


class ConsultantNotFoundError(NotFoundError):
    """Raised when the owning consultant does not exist."""

    def __init__(self, consultant_id: str) -> None:
        super().__init__("Consultant not found", {"consultant_id": consultant_id})
        self.consultant_id = consultant_id


class DuplicateSkillError(ConflictError):
    """Raised when a consultant already holds a skill with the same name."""

    def __init__(self, skill_name: str) -> None:
        super().__init__(
            "Consultant already has this skill", {"skill_name": skill_name}
        )
        self.skill_name = skill_name


class DuplicateEndorsementError(ConflictError):
    """Raised when an endorser has already endorsed the skill record."""

    def __init__(self, endorser_id: str) -> None:
        super().__init__(
            "You have already endorsed this skill", {"endorser_id": endorser_id}
        )
        self.endorser_id = endorser_id
