"""Client-side control state models.

These never travel over the wire.  They describe what the session tracker
and the keyboard debouncer derive, and what the dashboard is shown.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from pybasectl.models.velocity import VelocityVector

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class ControlState(enum.StrEnum):
    """Control authority as derived from the latest base status."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED_BUT_NOT_HOLD = "initialized_but_not_hold"
    CAN_MOVE = "can_move"


class KeyId(enum.StrEnum):
    """Recognized input identities.

    Anything the keymap does not know collapses into ``OTHER``: it is
    still tracked as held (and shown) but never contributes to velocity.
    """

    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"
    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    TERMINATE = "terminate"
    OTHER = "other"


class EvictionPolicy(enum.StrEnum):
    """How the debouncer decides a key has been released.

    ``SHARED`` keeps a single eviction timeout for every tracked key, set
    by whichever key produced the latest event.  ``PER_KEY`` derives the
    timeout from each record's own holding flag.
    """

    SHARED = "shared"
    PER_KEY = "per_key"


# ------------------------------------------------------------------
# Records
# ------------------------------------------------------------------


@dataclass(slots=True)
class KeyHoldRecord:
    """Debounce bookkeeping for one tracked key."""

    key: KeyId
    last_seen_at: float
    holding: bool = False

    def age(self, now: float) -> float:
        return now - self.last_seen_at


class ErrorNotice(BaseModel):
    """Transient operator-visible notice.

    The default instance (empty message, no timestamp) means "no notice"
    and never expires.
    """

    model_config = ConfigDict(frozen=True)

    message: str = ""
    raised_at: float | None = None

    @classmethod
    def raise_now(cls, message: str, *, now: float | None = None) -> ErrorNotice:
        return cls(message=message, raised_at=time.monotonic() if now is None else now)

    @property
    def is_empty(self) -> bool:
        return not self.message

    def is_expired(self, ttl: float, now: float) -> bool:
        """Whether at least *ttl* seconds have passed since the notice was raised."""
        if self.raised_at is None:
            return False
        return now - self.raised_at >= ttl


class Snapshot(BaseModel):
    """Point-in-time view handed to the presentation layer.

    Fields are read one lock at a time, so two fields may come from
    slightly different instants.
    """

    model_config = ConfigDict(frozen=True)

    control_state: ControlState = ControlState.UNINITIALIZED
    target_velocity: VelocityVector = Field(default_factory=VelocityVector)
    actual_velocity: VelocityVector | None = None
    held_keys: frozenset[KeyId] = frozenset()
    error_notice: ErrorNotice = Field(default_factory=ErrorNotice)
    emergency: bool = False
