from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from consultant_skills.application.dtos.skill_dtos import AccessContext
from consultant_skills.application.services.consultant_skill_service import (
    ConsultantSkillService,
)
from consultant_skills.container import create_consultant_skill_service
from consultant_skills.core.config import Settings
from consultant_skills.core.db import create_engine_for_url, create_session_factory, init_db
from consultant_skills.infrastructure.collaborators import (
    AnalyticsSink,
    NotificationSender,
)
from consultant_skills.infrastructure.database.repositories.consultant_repository import (
    SqlConsultantRepository,
)
from consultant_skills.infrastructure.database.repositories.skill_record_repository import (
    SqlSkillRecordRepository,
)
from consultant_skills.tests.utils.factories import TENANT_ID, make_consultant


class RecordingNotificationSender(NotificationSender):
    """Notification double that keeps every sent email."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = False

    async def send_email(self, to: str, template: str, data: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("mail relay unavailable")
        self.sent.append({"to": to, "template": template, "data": data})

    def templates(self) -> list[str]:
        return [message["template"] for message in self.sent]


class RecordingAnalyticsSink(AnalyticsSink):
    """Analytics double that keeps every tracked event."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []
        self.fail = False

    async def track_event(
        self,
        event_type: str,
        entity_type: str,
        entity_id: str,
        tenant_id: str,
        payload: dict[str, Any],
    ) -> None:
        if self.fail:
            raise ConnectionError("analytics endpoint unavailable")
        self.events.append(
            {
                "event_type": event_type,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "tenant_id": tenant_id,
                "payload": payload,
            }
        )

    def event_types(self) -> list[str]:
        return [event["event_type"] for event in self.events]


@pytest.fixture
def test_settings() -> Settings:
    """Settings with fast side-effect retries and small limits for limit tests."""
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        COMPANY_TENANT_ID=TENANT_ID,
        MAX_SKILLS_PER_CONSULTANT=5,
        MAX_ENDORSEMENTS_PER_SKILL=3,
        MAX_PROJECT_HISTORY_PER_SKILL=3,
        SIDE_EFFECT_MAX_ATTEMPTS=2,
        SIDE_EFFECT_RETRY_BASE_DELAY=0.0,
        SIDE_EFFECT_RETRY_MAX_DELAY=0.0,
    )


@pytest_asyncio.fixture
async def engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_engine_for_url(test_settings.DATABASE_URL, echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def skill_repository(session_factory) -> SqlSkillRecordRepository:
    return SqlSkillRecordRepository(session_factory)


@pytest.fixture
def consultant_repository(session_factory) -> SqlConsultantRepository:
    return SqlConsultantRepository(session_factory)


@pytest.fixture
def notifications() -> RecordingNotificationSender:
    return RecordingNotificationSender()


@pytest.fixture
def analytics() -> RecordingAnalyticsSink:
    return RecordingAnalyticsSink()


@pytest.fixture
def service(
    session_factory, notifications, analytics, test_settings
) -> ConsultantSkillService:
    return create_consultant_skill_service(
        session_factory,
        notifications=notifications,
        analytics=analytics,
        config=test_settings,
    )


@pytest_asyncio.fixture
async def consultant(consultant_repository):
    """A stored consultant in the default test tenant."""
    return await consultant_repository.add(
        make_consultant(first_name="Ada", last_name="Lovelace", email="ada@example.com")
    )


@pytest.fixture
def ctx() -> AccessContext:
    """Context of a manager acting inside the test tenant."""
    return AccessContext(tenant_id=TENANT_ID, user_id="manager-1")
