from typing import Literal

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "consultant-skills"
    ENVIRONMENT: Literal["local", "test", "staging", "production"] = "local"

    # Tenancy
    COMPANY_TENANT_ID: str = "default"
    PLATFORM_URL: str = "https://yourplatform.com"

    # Skill record limits
    MAX_SKILLS_PER_CONSULTANT: int = 100
    MAX_ENDORSEMENTS_PER_SKILL: int = 50
    MAX_PROJECT_HISTORY_PER_SKILL: int = 100

    # Assessment weighting (used by the weighted scoring mode)
    SELF_ASSESSMENT_WEIGHT: float = 0.2
    MANAGER_ASSESSMENT_WEIGHT: float = 0.4
    PEER_ASSESSMENT_WEIGHT: float = 0.3
    CERTIFICATION_WEIGHT: float = 0.3
    PROFICIENCY_SCORING_MODE: Literal["latest", "weighted"] = "latest"

    DEFAULT_CURRENCY: str = "USD"

    # Query defaults
    DEFAULT_PAGE_LIMIT: int = 50
    MAX_PAGE_LIMIT: int = 100
    DEFAULT_SEARCH_LIMIT: int = 50
    DEFAULT_MATRIX_LIMIT: int = 100
    RECENTLY_UPDATED_LIMIT: int = 10
    TOP_SKILLS_LIMIT: int = 20

    # Side effects (projection sync, notifications, analytics)
    SIDE_EFFECT_MAX_ATTEMPTS: int = 2
    SIDE_EFFECT_RETRY_BASE_DELAY: float = 0.05  # seconds
    SIDE_EFFECT_RETRY_MAX_DELAY: float = 2.0  # seconds

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./consultant_skills.db"
    DATABASE_ECHO: bool = False

    # Observability
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "console"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def assessment_weights(self) -> dict[str, float]:
        return {
            "self": self.SELF_ASSESSMENT_WEIGHT,
            "manager": self.MANAGER_ASSESSMENT_WEIGHT,
            "peer": self.PEER_ASSESSMENT_WEIGHT,
            "certification": self.CERTIFICATION_WEIGHT,
        }

    @model_validator(mode="after")
    def _check_limits(self) -> Self:
        for name in (
            "MAX_SKILLS_PER_CONSULTANT",
            "MAX_ENDORSEMENTS_PER_SKILL",
            "MAX_PROJECT_HISTORY_PER_SKILL",
            "MAX_PAGE_LIMIT",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.DEFAULT_PAGE_LIMIT > self.MAX_PAGE_LIMIT:
            self.DEFAULT_PAGE_LIMIT = self.MAX_PAGE_LIMIT
        if self.SIDE_EFFECT_MAX_ATTEMPTS < 1:
            self.SIDE_EFFECT_MAX_ATTEMPTS = 1
        return self


settings = Settings()  # type: ignore
