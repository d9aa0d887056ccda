"""Keyboard debouncer.

Terminals only report key presses and auto-repeats, never releases.  The
debouncer infers "held" from that stream: a key is held while events for
it keep arriving and released once none has arrived for an eviction
window.  The first press of a key gets a long window so a single tap is
not mistaken for noise before repeat kicks in; after a repeat, releases
are detected with the short window.

With :attr:`EvictionPolicy.SHARED` the window is one value for all keys,
set by whichever key produced the latest event.  A fresh tap on one key
therefore stretches the window of a key that is already being held.
:attr:`EvictionPolicy.PER_KEY` gives each record its own window.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Collection
from typing import Protocol

from pybasectl import _constants as c
from pybasectl.exceptions import BasectlInputError
from pybasectl.models.state import EvictionPolicy, KeyHoldRecord, KeyId
from pybasectl.models.velocity import VelocityVector
from pybasectl.state.context import TeleopContext

_logger = logging.getLogger(__name__)


class KeySource(Protocol):
    """Source of key-identity events.

    ``poll`` waits at most *timeout* seconds and returns ``None`` when no
    key arrived in that window.
    """

    async def poll(self, timeout: float) -> KeyId | None: ...


def _axis(keys: Collection[KeyId], positive: KeyId, negative: KeyId, speed: float) -> float:
    has_pos = positive in keys
    has_neg = negative in keys
    if has_pos and not has_neg:
        return speed
    if has_neg and not has_pos:
        return -speed
    return 0.0


def velocity_for_keys(keys: Collection[KeyId], linear_speed: float, angular_speed: float) -> VelocityVector:
    """Target velocity from the set of held keys.

    Opposite keys on the same axis cancel out.
    """
    return VelocityVector(
        x=_axis(keys, KeyId.FORWARD, KeyId.BACKWARD, linear_speed),
        y=_axis(keys, KeyId.RIGHT, KeyId.LEFT, linear_speed),
        z=_axis(keys, KeyId.ROTATE_LEFT, KeyId.ROTATE_RIGHT, angular_speed),
    )


class KeyDebouncer:
    """Maintains held keys and target velocity in a :class:`TeleopContext`."""

    def __init__(
        self,
        context: TeleopContext,
        *,
        linear_speed: float = c.LINEAR_SPEED,
        angular_speed: float = c.ANGULAR_SPEED,
        poll_interval: float = c.POLL_INTERVAL,
        tap_release_timeout: float = c.TAP_RELEASE_TIMEOUT,
        hold_release_timeout: float = c.HOLD_RELEASE_TIMEOUT,
        initial_release_timeout: float = c.INITIAL_RELEASE_TIMEOUT,
        policy: EvictionPolicy = EvictionPolicy.SHARED,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._context = context
        self._linear_speed = linear_speed
        self._angular_speed = angular_speed
        self._poll_interval = poll_interval
        self._tap_timeout = tap_release_timeout
        self._hold_timeout = hold_release_timeout
        self._policy = policy
        self._clock = clock
        self._release_timeout = initial_release_timeout

    @property
    def release_timeout(self) -> float:
        """Current shared eviction window."""
        return self._release_timeout

    def press(self, key: KeyId, now: float | None = None) -> bool:
        """Record a press or repeat of *key*.

        Returns ``False`` when *key* is the terminate key: the exit flag is
        raised and the debouncer should stop.
        """
        if key == KeyId.TERMINATE:
            _logger.info("Terminate key pressed")
            self._context.terminate.set(True)
            return False

        now = self._clock() if now is None else now
        held = self._context.held_keys
        with held.locked():
            record = held.value.get(key)
            if record is None:
                held.value[key] = KeyHoldRecord(key=key, last_seen_at=now)
                self._release_timeout = self._tap_timeout
            else:
                record.holding = True
                record.last_seen_at = now
                self._release_timeout = self._hold_timeout
        return True

    def _timeout_for(self, record: KeyHoldRecord) -> float:
        if self._policy == EvictionPolicy.PER_KEY:
            return self._hold_timeout if record.holding else self._tap_timeout
        return self._release_timeout

    def evict(self, now: float | None = None) -> list[KeyId]:
        """Drop every record older than its eviction window."""
        now = self._clock() if now is None else now
        held = self._context.held_keys
        with held.locked():
            released = [key for key, record in held.value.items() if record.age(now) > self._timeout_for(record)]
            for key in released:
                del held.value[key]
        if released:
            _logger.debug("Released keys: %s", ", ".join(k.value for k in released))
        return released

    def recompute(self) -> VelocityVector:
        """Publish the target velocity for the current held keys."""
        target = velocity_for_keys(self._context.held_key_ids(), self._linear_speed, self._angular_speed)
        self._context.target_velocity.set(target)
        return target

    async def run(self, source: KeySource) -> None:
        """Poll *source* until the terminate key or an input failure.

        An input failure ends the loop quietly; the last published target
        velocity stays as it is.
        """
        while True:
            try:
                key = await source.poll(self._poll_interval)
            except (BasectlInputError, OSError):
                _logger.debug("Keyboard input ended", exc_info=True)
                return

            if key is None:
                self.evict()
            elif not self.press(key):
                return
            self.recompute()
