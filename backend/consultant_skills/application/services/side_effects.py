"""
Side effects of skill record operations.

Mutating operations return an ordered list of effects (projection sync,
notification, analytics event). The runner executes them after the primary
write. Each effect is retried on its own and a failing effect never fails the
operation; the outcome is reported in an EffectReport.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from ...core.observability import get_logger
from ...core.retry import RetryConfig, execute_with_retry
from ...domain.skills.entities.skill_record import ConsultantSkillSummary
from ...domain.skills.value_objects.enums import SyncAction
from ...infrastructure.collaborators import AnalyticsSink, NotificationSender
from .consultant_sync_projector import ConsultantSyncProjector

logger = get_logger(__name__)

SKILL_ENTITY_TYPE = "consultant_skill"


@dataclass(frozen=True)
class SyncProjection:
    consultant_id: str
    action: SyncAction
    skill_id: str
    summary: ConsultantSkillSummary | None = None

    @property
    def name(self) -> str:
        return f"sync_projection:{self.action.value}"


@dataclass(frozen=True)
class SendNotification:
    to: str
    template: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return f"notification:{self.template}"


@dataclass(frozen=True)
class TrackEvent:
    event_type: str
    entity_id: str
    tenant_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    entity_type: str = SKILL_ENTITY_TYPE

    @property
    def name(self) -> str:
        return f"event:{self.event_type}"


SideEffect = SyncProjection | SendNotification | TrackEvent


@dataclass
class EffectReport:
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


class SideEffectRunner:
    """Executes side effects with per-effect retry and failure isolation."""

    def __init__(
        self,
        projector: ConsultantSyncProjector,
        notifications: NotificationSender,
        analytics: AnalyticsSink,
        retry_config: RetryConfig | None = None,
    ):
        self.projector = projector
        self.notifications = notifications
        self.analytics = analytics
        self.retry_config = retry_config or RetryConfig()

    async def _dispatch(self, effect: SideEffect) -> None:
        if isinstance(effect, SyncProjection):
            await self.projector.project(
                effect.consultant_id, effect.action, effect.skill_id, effect.summary
            )
        elif isinstance(effect, SendNotification):
            await self.notifications.send_email(effect.to, effect.template, effect.data)
        elif isinstance(effect, TrackEvent):
            await self.analytics.track_event(
                effect.event_type,
                effect.entity_type,
                effect.entity_id,
                effect.tenant_id,
                effect.payload,
            )
        else:
            raise TypeError(f"Unknown side effect: {effect!r}")

    async def run(self, effects: Sequence[SideEffect]) -> EffectReport:
        """Run effects in order; never raises."""
        report = EffectReport()
        for effect in effects:
            try:
                await execute_with_retry(
                    partial(self._dispatch, effect), effect.name, self.retry_config
                )
            except Exception as e:
                logger.warning(
                    "Side effect failed",
                    effect=effect.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                report.failed.append(effect.name)
            else:
                report.succeeded.append(effect.name)
        return report
