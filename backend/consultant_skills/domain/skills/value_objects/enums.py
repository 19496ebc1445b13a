"""Domain enums for consultant skills."""

from enum import Enum


class SkillCategory(str, Enum):
    """Skill category enumeration."""

    TECHNICAL = "technical"
    FUNCTIONAL = "functional"
    DOMAIN = "domain"
    SOFT_SKILL = "soft_skill"
    TOOL = "tool"
    METHODOLOGY = "methodology"
    LANGUAGE = "language"
    FRAMEWORK = "framework"
    PLATFORM = "platform"
    DATABASE = "database"
    OTHER = "other"


class ProficiencyLevel(str, Enum):
    """Six-point proficiency scale, ordered from NONE to MASTER."""

    NONE = "none"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"
    MASTER = "master"

    @property
    def score(self) -> int:
        """Canonical numeric score (0-100) for this level."""
        return _LEVEL_SCORES[self]

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @classmethod
    def from_score(cls, score: float) -> "ProficiencyLevel":
        """Derive a level from a numeric score using the weighted-mode bands."""
        if score <= 10:
            return cls.NONE
        if score <= 30:
            return cls.BEGINNER
        if score <= 50:
            return cls.INTERMEDIATE
        if score <= 70:
            return cls.ADVANCED
        if score <= 90:
            return cls.EXPERT
        return cls.MASTER

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ProficiencyLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ProficiencyLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ProficiencyLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ProficiencyLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_ORDER = list(ProficiencyLevel)

_LEVEL_SCORES = {
    ProficiencyLevel.NONE: 0,
    ProficiencyLevel.BEGINNER: 20,
    ProficiencyLevel.INTERMEDIATE: 40,
    ProficiencyLevel.ADVANCED: 60,
    ProficiencyLevel.EXPERT: 80,
    ProficiencyLevel.MASTER: 100,
}


class VerificationStatus(str, Enum):
    """How a skill's proficiency has been corroborated."""

    NOT_VERIFIED = "not_verified"
    SELF_ASSESSED = "self_assessed"
    PEER_VERIFIED = "peer_verified"
    MANAGER_VERIFIED = "manager_verified"
    CERTIFIED = "certified"
    TESTED = "tested"

    @property
    def is_verified(self) -> bool:
        """Check if a third party (peer, manager, certification, test) corroborated the skill."""
        return self in VERIFIED_STATUSES

    @property
    def rank(self) -> int:
        """Position in the verification lattice; peer and manager share a tier."""
        return _VERIFICATION_RANKS[self]


VERIFIED_STATUSES = frozenset(
    {
        VerificationStatus.PEER_VERIFIED,
        VerificationStatus.MANAGER_VERIFIED,
        VerificationStatus.CERTIFIED,
        VerificationStatus.TESTED,
    }
)

_VERIFICATION_RANKS = {
    VerificationStatus.NOT_VERIFIED: 0,
    VerificationStatus.SELF_ASSESSED: 1,
    VerificationStatus.PEER_VERIFIED: 2,
    VerificationStatus.MANAGER_VERIFIED: 2,
    VerificationStatus.CERTIFIED: 3,
    VerificationStatus.TESTED: 3,
}


class AssessmentType(str, Enum):
    """Source of a proficiency assessment."""

    SELF = "self"
    MANAGER = "manager"
    PEER = "peer"
    CERTIFICATION = "certification"
    TEST = "test"


class SkillApplication(str, Enum):
    """How a skill was applied on a project."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUPPORTING = "supporting"
    LEARNING = "learning"


class ProjectComplexity(str, Enum):
    BASIC = "basic"
    MODERATE = "moderate"
    COMPLEX = "complex"
    EXPERT_LEVEL = "expert_level"


class SkillStatus(str, Enum):
    """Skill record lifecycle status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"
    DEPRECATED = "deprecated"


class SkillSource(str, Enum):
    """Where a skill record came from."""

    MANUAL = "manual"
    IMPORT = "import"
    LINKEDIN = "linkedin"
    RESUME_PARSE = "resume_parse"
    CERTIFICATION = "certification"
    PROJECT = "project"
    API = "api"


class SyncAction(str, Enum):
    """Consultant projection sync action."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
