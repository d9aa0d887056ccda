"""Session state tracker.

Turns each inbound frame into control state, emergency flag, error notice
and actual velocity.  The tracker keeps no history of its own beyond what
it writes into the shared context.

Notice precedence is applied in this literal order for every base
status:

1. parking detail present: emergency on, notice overwritten;
2. otherwise: emergency off, notice cleared only if it has expired;
3. control state computed from the frame alone;
4. actual velocity refreshed while in control;
5. after storing the state, "held elsewhere" or "version mismatch"
   overwrite the notice regardless of step 2.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pybasectl import _constants as c
from pybasectl.models.state import ControlState, ErrorNotice
from pybasectl.models.wire import ApiUp, BaseStatus
from pybasectl.state.context import TeleopContext

_logger = logging.getLogger(__name__)


def derive_control_state(status: BaseStatus, session_id: int) -> ControlState:
    """Control state as a pure function of one status report."""
    if not status.api_control_initialized:
        return ControlState.UNINITIALIZED
    if not status.parking and status.session_holder == session_id:
        return ControlState.CAN_MOVE
    return ControlState.INITIALIZED_BUT_NOT_HOLD


def format_parking_notice(detail: object) -> str:
    return f"Emergency Stop: {detail}"


class SessionStateTracker:
    """Applies inbound frames to a :class:`TeleopContext`.

    Performs no I/O and never awaits, so it can run synchronously inside
    the receiver for every frame.
    """

    def __init__(
        self,
        context: TeleopContext,
        *,
        accepted_protocol_major_version: int = c.ACCEPTABLE_PROTOCOL_MAJOR_VERSION,
        error_notice_ttl: float = c.ERROR_NOTICE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._context = context
        self._accepted_version = accepted_protocol_major_version
        self._notice_ttl = error_notice_ttl
        self._clock = clock

    def apply(self, frame: ApiUp) -> ControlState | None:
        """Apply one frame; return the new control state if it carried a status."""
        if frame.log is not None:
            self._raise_notice(f"Log: {frame.log}")

        status = frame.base_status
        if status is None:
            return None

        state = self._apply_status(status, frame.session_id)
        previous = self._context.control_state.get()
        self._context.control_state.set(state)
        if state != previous:
            _logger.info("Control state %s -> %s", previous.value, state.value)

        if state == ControlState.INITIALIZED_BUT_NOT_HOLD:
            self._raise_notice(c.NOTICE_CONTROL_HELD_ELSEWHERE)
        if state == ControlState.CAN_MOVE and frame.protocol_major_version != self._accepted_version:
            _logger.debug(
                "Protocol major version %s, expected %s",
                frame.protocol_major_version,
                self._accepted_version,
            )
            self._raise_notice(c.NOTICE_PROTOCOL_MISMATCH)
        return state

    def _apply_status(self, status: BaseStatus, session_id: int) -> ControlState:
        ctx = self._context
        if status.parking:
            self._raise_notice(format_parking_notice(status.parking_stop_detail))
            ctx.emergency.set(True)
        else:
            ctx.emergency.set(False)
            now = self._clock()
            ttl = self._notice_ttl
            ctx.error_notice.update(lambda notice: ErrorNotice() if notice.is_expired(ttl, now) else notice)

        state = derive_control_state(status, session_id)

        if state == ControlState.CAN_MOVE and status.estimated_odometry is not None:
            ctx.actual_velocity.set(status.estimated_odometry.to_vector())

        return state

    def _raise_notice(self, message: str) -> None:
        self._context.error_notice.set(ErrorNotice.raise_now(message, now=self._clock()))
