"""pybasectl - Async keyboard teleoperation client for robot bases."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybasectl")
except PackageNotFoundError:
    __version__ = "0+local"
from pybasectl.config import TeleopConfig
from pybasectl.exceptions import (
    BasectlConfigError,
    BasectlDecodeError,
    BasectlError,
    BasectlInputError,
    BasectlTransportError,
)
from pybasectl.input.debouncer import KeyDebouncer, velocity_for_keys
from pybasectl.loop import CommandLoop, LoopOutcome
from pybasectl.models import (
    ApiDown,
    ApiUp,
    BaseStatus,
    ControlState,
    ErrorNotice,
    EvictionPolicy,
    KeyId,
    ReportFrequency,
    Snapshot,
    VelocityVector,
)
from pybasectl.session import TeleopSession
from pybasectl.state.context import TeleopContext
from pybasectl.state.tracker import SessionStateTracker, derive_control_state

__all__ = [
    "__version__",
    "ApiDown",
    "ApiUp",
    "BaseStatus",
    "BasectlConfigError",
    "BasectlDecodeError",
    "BasectlError",
    "BasectlInputError",
    "BasectlTransportError",
    "CommandLoop",
    "ControlState",
    "ErrorNotice",
    "EvictionPolicy",
    "KeyDebouncer",
    "KeyId",
    "LoopOutcome",
    "ReportFrequency",
    "SessionStateTracker",
    "Snapshot",
    "TeleopConfig",
    "TeleopContext",
    "TeleopSession",
    "VelocityVector",
    "derive_control_state",
    "velocity_for_keys",
]
