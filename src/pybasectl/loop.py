"""Command reconciliation loop.

The only place where control state and target velocity meet.  Every tick
it hands a snapshot to the renderer and then, depending on control state,
sends at most one kind of command:

* ``UNINITIALIZED``: report frequency followed by acquire-control.  Sent
  again on every tick until a status frame says otherwise.
* ``CAN_MOVE``: move with the current target, zero vector included.
* ``INITIALIZED_BUT_NOT_HOLD``: nothing.

The terminate flag is checked before the state machine; it triggers a
single release-control command and ends the loop.
"""

from __future__ import annotations

import asyncio
import enum
import logging

from pybasectl import _constants as c
from pybasectl import messages
from pybasectl._codec import FrameCodec
from pybasectl._transport import Transport
from pybasectl.exceptions import BasectlTransportError
from pybasectl.models.state import ControlState, Snapshot
from pybasectl.models.wire import ApiDown, ReportFrequency
from pybasectl.state.context import TeleopContext
from pybasectl.ui import Renderer

_logger = logging.getLogger(__name__)


class LoopOutcome(enum.StrEnum):
    """Why :meth:`CommandLoop.run` returned."""

    RELEASED = "released"
    TRANSPORT_FAILED = "transport_failed"


class CommandLoop:
    """Fixed-rate command emitter."""

    def __init__(
        self,
        context: TeleopContext,
        transport: Transport,
        codec: FrameCodec,
        renderer: Renderer,
        *,
        tick_interval: float = c.TICK_INTERVAL,
        release_grace: float = c.RELEASE_GRACE,
        report_frequency: ReportFrequency = ReportFrequency.RF_50HZ,
    ) -> None:
        self._context = context
        self._transport = transport
        self._codec = codec
        self._renderer = renderer
        self._tick_interval = tick_interval
        self._release_grace = release_grace
        self._report_frequency = report_frequency
        self._ticks = 0

    @property
    def ticks(self) -> int:
        return self._ticks

    async def run(self) -> LoopOutcome:
        """Tick until release or transport failure."""
        while True:
            await asyncio.sleep(self._tick_interval)
            outcome = await self.tick()
            if outcome is not None:
                _logger.info("Command loop finished after %d ticks: %s", self._ticks, outcome.value)
                return outcome

    async def tick(self) -> LoopOutcome | None:
        """Run one iteration; return an outcome once the loop must stop."""
        self._ticks += 1
        snapshot = self._context.snapshot()
        self._render(snapshot)

        if self._context.terminate.get():
            await self._release()
            return LoopOutcome.RELEASED

        state = snapshot.control_state
        if state == ControlState.UNINITIALIZED:
            if not await self._send(messages.create_set_frequency_msg(self._report_frequency)):
                return LoopOutcome.TRANSPORT_FAILED
            if not await self._send(messages.create_init_msg()):
                return LoopOutcome.TRANSPORT_FAILED
        elif state == ControlState.CAN_MOVE:
            if not await self._send(messages.create_move_msg_from_vector(snapshot.target_velocity)):
                return LoopOutcome.TRANSPORT_FAILED
        # INITIALIZED_BUT_NOT_HOLD: wait for the next status frame.
        return None

    def _render(self, snapshot: Snapshot) -> None:
        try:
            self._renderer.render(snapshot)
        except Exception:
            _logger.debug("Render failed", exc_info=True)

    async def _send(self, message: ApiDown) -> bool:
        try:
            await self._transport.send(self._codec.encode(message))
        except BasectlTransportError:
            _logger.warning("Send failed, stopping command loop", exc_info=True)
            return False
        return True

    async def _release(self) -> None:
        _logger.info("Releasing control")
        try:
            await self._transport.send(self._codec.encode(messages.create_close_msg()))
        except BasectlTransportError:
            _logger.warning("Release command not delivered", exc_info=True)
        # Give the frame a chance to leave before the channel is closed.
        await asyncio.sleep(self._release_grace)
