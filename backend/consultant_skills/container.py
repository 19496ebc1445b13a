"""
Service wiring.

Builds the consultant skill service from a session factory and optional
collaborators. The store handle is created once by the caller and injected;
nothing here holds global state.
"""

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from .application.services.consultant_skill_service import ConsultantSkillService
from .application.services.consultant_sync_projector import ConsultantSyncProjector
from .application.services.side_effects import SideEffectRunner
from .core.config import Settings, settings
from .core.retry import retry_config_from_settings
from .infrastructure.collaborators import (
    AnalyticsSink,
    LoggingAnalyticsSink,
    LoggingNotificationSender,
    NotificationSender,
)
from .infrastructure.database.repositories.consultant_repository import (
    SqlConsultantRepository,
)
from .infrastructure.database.repositories.skill_record_repository import (
    SqlSkillRecordRepository,
)


def create_consultant_skill_service(
    session_factory: async_sessionmaker[AsyncSession],
    notifications: NotificationSender | None = None,
    analytics: AnalyticsSink | None = None,
    config: Settings = settings,
) -> ConsultantSkillService:
    """
    Wire repositories, side-effect runner and service.

    Args:
        session_factory: Async session factory bound to the store engine
        notifications: Notification sender; defaults to a logging sender
        analytics: Analytics sink; defaults to a logging sink
        config: Settings to use instead of the module-level instance

    Returns:
        Ready-to-use ConsultantSkillService
    """
    skill_records = SqlSkillRecordRepository(session_factory)
    consultants = SqlConsultantRepository(session_factory)
    runner = SideEffectRunner(
        projector=ConsultantSyncProjector(consultants),
        notifications=notifications or LoggingNotificationSender(),
        analytics=analytics or LoggingAnalyticsSink(),
        retry_config=retry_config_from_settings(config),
    )
    return ConsultantSkillService(skill_records, consultants, runner, config)
