from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import pytest

from pybasectl._codec import JsonFrameCodec
from pybasectl.exceptions import BasectlTransportError
from pybasectl.models.state import ControlState
from pybasectl.state.context import TeleopContext
from pybasectl.state.receiver import receive_frames
from pybasectl.state.tracker import SessionStateTracker


def _status(holder: int, *, initialized: bool = True) -> bytes:
    return json.dumps(
        {
            "sessionId": 1,
            "protocolMajorVersion": 1,
            "baseStatus": {"apiControlInitialized": initialized, "sessionHolder": holder},
        }
    ).encode()


class _FrameFeed:
    def __init__(self, frames: list[bytes], *, error: Exception | None = None) -> None:
        self._frames = frames
        self._error = error

    async def send(self, payload: bytes) -> None:  # pragma: no cover
        return None

    async def frames(self) -> AsyncIterator[bytes]:
        for frame in self._frames:
            yield frame
        if self._error is not None:
            raise self._error

    async def close(self) -> None:  # pragma: no cover
        return None


def _tracker(ctx: TeleopContext) -> SessionStateTracker:
    return SessionStateTracker(ctx, clock=lambda: 0.0)


@pytest.mark.asyncio
async def test_applies_frames_until_close() -> None:
    ctx = TeleopContext()
    feed = _FrameFeed([_status(0, initialized=False), _status(1)])

    applied = await receive_frames(feed, JsonFrameCodec(), _tracker(ctx))

    assert applied == 2
    assert ctx.control_state.get() == ControlState.CAN_MOVE


@pytest.mark.asyncio
async def test_decode_failure_ends_receiver() -> None:
    ctx = TeleopContext()
    feed = _FrameFeed([_status(1), b"garbage", _status(2)])

    applied = await receive_frames(feed, JsonFrameCodec(), _tracker(ctx))

    assert applied == 1
    assert ctx.control_state.get() == ControlState.CAN_MOVE


@pytest.mark.asyncio
async def test_transport_error_ends_receiver() -> None:
    ctx = TeleopContext()
    error: Any = BasectlTransportError("reset")
    feed = _FrameFeed([_status(2)], error=error)

    applied = await receive_frames(feed, JsonFrameCodec(), _tracker(ctx))

    assert applied == 1
    assert ctx.control_state.get() == ControlState.INITIALIZED_BUT_NOT_HOLD
