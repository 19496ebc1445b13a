from .consultant_skill_service import ConsultantSkillService
from .consultant_sync_projector import ConsultantSyncProjector
from .side_effects import (
    EffectReport,
    SendNotification,
    SideEffect,
    SideEffectRunner,
    SyncProjection,
    TrackEvent,
)

__all__ = [
    "ConsultantSkillService",
    "ConsultantSyncProjector",
    "EffectReport",
    "SendNotification",
    "SideEffect",
    "SideEffectRunner",
    "SyncProjection",
    "TrackEvent",
]
