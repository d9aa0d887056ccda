"""Shared teleoperation state.

The receiver, the keyboard debouncer and the command loop each update a
few fields here.  Every field has its own lock and no lock is ever held
while acquiring another, so a :class:`~pybasectl.models.state.Snapshot`
may combine values observed at slightly different instants.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from pybasectl.models.state import ControlState, ErrorNotice, KeyHoldRecord, KeyId, Snapshot
from pybasectl.models.velocity import VelocityVector

T = TypeVar("T")


class Guarded(Generic[T]):
    """A single value behind its own exclusive lock.

    ``threading.Lock`` rather than ``asyncio.Lock``: critical sections
    never await, and the keyboard source may touch state from a worker
    thread.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self, value: T) -> None:
        self._lock = threading.Lock()
        self._value = value

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def update(self, fn: Callable[[T], T]) -> T:
        """Replace the value with ``fn(value)`` atomically and return it."""
        with self._lock:
            self._value = fn(self._value)
            return self._value

    def locked(self) -> threading.Lock:
        """Expose the lock for in-place mutation of mutable values."""
        return self._lock

    @property
    def value(self) -> T:
        """Unlocked access; only valid while holding :meth:`locked`."""
        return self._value


class TeleopContext:
    """Process-wide state for one teleoperation session.

    Created when the session starts and dropped when it ends; nothing is
    persisted.
    """

    def __init__(self) -> None:
        self.control_state: Guarded[ControlState] = Guarded(ControlState.UNINITIALIZED)
        self.actual_velocity: Guarded[VelocityVector | None] = Guarded(None)
        self.emergency: Guarded[bool] = Guarded(False)
        self.error_notice: Guarded[ErrorNotice] = Guarded(ErrorNotice())
        self.target_velocity: Guarded[VelocityVector] = Guarded(VelocityVector.zero())
        self.held_keys: Guarded[dict[KeyId, KeyHoldRecord]] = Guarded({})
        self.terminate: Guarded[bool] = Guarded(False)

    def held_key_ids(self) -> frozenset[KeyId]:
        with self.held_keys.locked():
            return frozenset(self.held_keys.value)

    def snapshot(self) -> Snapshot:
        """Read every field, one lock at a time."""
        return Snapshot(
            control_state=self.control_state.get(),
            target_velocity=self.target_velocity.get(),
            actual_velocity=self.actual_velocity.get(),
            held_keys=self.held_key_ids(),
            error_notice=self.error_notice.get(),
            emergency=self.emergency.get(),
        )
