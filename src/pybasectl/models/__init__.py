"""Wire and state models for pybasectl."""

from pybasectl.models.state import (
    ControlState,
    ErrorNotice,
    EvictionPolicy,
    KeyHoldRecord,
    KeyId,
    Snapshot,
)
from pybasectl.models.velocity import VelocityVector
from pybasectl.models.wire import (
    ApiDown,
    ApiUp,
    BaseCommand,
    BaseStatus,
    ReportFrequency,
    XyzSpeed,
)

__all__ = [
    "ApiDown",
    "ApiUp",
    "BaseCommand",
    "BaseStatus",
    "ControlState",
    "ErrorNotice",
    "EvictionPolicy",
    "KeyHoldRecord",
    "KeyId",
    "ReportFrequency",
    "Snapshot",
    "VelocityVector",
    "XyzSpeed",
]
