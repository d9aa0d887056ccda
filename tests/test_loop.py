"""Tests for the command reconciliation loop."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import pytest

from pybasectl._codec import JsonFrameCodec
from pybasectl.exceptions import BasectlTransportError
from pybasectl.loop import CommandLoop, LoopOutcome
from pybasectl.models.state import ControlState, Snapshot
from pybasectl.models.velocity import VelocityVector
from pybasectl.state.context import TeleopContext

RELEASE = {"baseCommand": {"apiControlInitialize": False}}
ACQUIRE = {"baseCommand": {"apiControlInitialize": True}}
SET_50HZ = {"setReportFrequency": 3}


class _FakeTransport:
    def __init__(self, *, fail_after: int | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self._fail_after = fail_after

    async def send(self, payload: bytes) -> None:
        if self._fail_after is not None and len(self.sent) >= self._fail_after:
            raise BasectlTransportError("connection reset")
        self.sent.append(json.loads(payload))

    async def frames(self) -> AsyncIterator[bytes]:  # pragma: no cover
        return
        yield b""

    async def close(self) -> None:  # pragma: no cover
        return None


class _RecordingRenderer:
    def __init__(self) -> None:
        self.snapshots: list[Snapshot] = []

    def render(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)


class _BrokenRenderer:
    def render(self, snapshot: Snapshot) -> None:
        raise RuntimeError("terminal gone")


def _loop(
    ctx: TeleopContext,
    transport: _FakeTransport,
    renderer: Any | None = None,
) -> CommandLoop:
    return CommandLoop(
        ctx,
        transport,
        JsonFrameCodec(),
        renderer or _RecordingRenderer(),
        tick_interval=0.001,
        release_grace=0.0,
    )


def _move(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> dict[str, Any]:
    return {"baseCommand": {"simpleMoveCommand": {"speedX": x, "speedY": y, "speedZ": z}}}


@pytest.mark.asyncio
async def test_uninitialized_sends_frequency_then_acquire_every_tick() -> None:
    ctx = TeleopContext()
    transport = _FakeTransport()
    loop = _loop(ctx, transport)

    assert await loop.tick() is None
    assert await loop.tick() is None

    assert transport.sent == [SET_50HZ, ACQUIRE, SET_50HZ, ACQUIRE]


@pytest.mark.asyncio
async def test_can_move_sends_zero_vector() -> None:
    ctx = TeleopContext()
    ctx.control_state.set(ControlState.CAN_MOVE)
    transport = _FakeTransport()

    await _loop(ctx, transport).tick()

    assert transport.sent == [_move()]


@pytest.mark.asyncio
async def test_can_move_sends_target_velocity() -> None:
    ctx = TeleopContext()
    ctx.control_state.set(ControlState.CAN_MOVE)
    ctx.target_velocity.set(VelocityVector(x=0.1, z=-0.5))
    transport = _FakeTransport()

    await _loop(ctx, transport).tick()

    assert transport.sent == [_move(x=0.1, z=-0.5)]


@pytest.mark.asyncio
async def test_not_hold_sends_nothing() -> None:
    ctx = TeleopContext()
    ctx.control_state.set(ControlState.INITIALIZED_BUT_NOT_HOLD)
    ctx.target_velocity.set(VelocityVector(x=0.1))
    transport = _FakeTransport()
    renderer = _RecordingRenderer()
    loop = _loop(ctx, transport, renderer)

    for _ in range(25):
        assert await loop.tick() is None

    assert transport.sent == []
    assert len(renderer.snapshots) == 25


@pytest.mark.asyncio
async def test_terminate_sends_single_release_and_stops() -> None:
    ctx = TeleopContext()
    ctx.control_state.set(ControlState.CAN_MOVE)
    ctx.target_velocity.set(VelocityVector(x=0.1))
    transport = _FakeTransport()
    loop = _loop(ctx, transport)

    await loop.tick()
    ctx.terminate.set(True)
    outcome = await loop.run()

    assert outcome == LoopOutcome.RELEASED
    assert transport.sent == [_move(x=0.1), RELEASE]


@pytest.mark.asyncio
async def test_terminate_wins_over_uninitialized() -> None:
    ctx = TeleopContext()
    ctx.terminate.set(True)
    transport = _FakeTransport()

    assert await _loop(ctx, transport).tick() == LoopOutcome.RELEASED
    assert transport.sent == [RELEASE]


@pytest.mark.asyncio
async def test_send_failure_ends_loop_without_retry() -> None:
    ctx = TeleopContext()
    transport = _FakeTransport(fail_after=1)
    loop = _loop(ctx, transport)

    outcome = await loop.run()

    assert outcome == LoopOutcome.TRANSPORT_FAILED
    assert transport.sent == [SET_50HZ]
    assert loop.ticks == 1


@pytest.mark.asyncio
async def test_release_failure_still_exits() -> None:
    ctx = TeleopContext()
    ctx.terminate.set(True)
    transport = _FakeTransport(fail_after=0)

    assert await _loop(ctx, transport).run() == LoopOutcome.RELEASED


@pytest.mark.asyncio
async def test_render_failure_does_not_abort() -> None:
    ctx = TeleopContext()
    ctx.control_state.set(ControlState.CAN_MOVE)
    transport = _FakeTransport()
    loop = _loop(ctx, transport, _BrokenRenderer())

    assert await loop.tick() is None
    assert transport.sent == [_move()]


@pytest.mark.asyncio
async def test_snapshot_reflects_context() -> None:
    ctx = TeleopContext()
    ctx.control_state.set(ControlState.INITIALIZED_BUT_NOT_HOLD)
    ctx.emergency.set(True)
    ctx.actual_velocity.set(VelocityVector(y=0.2))
    renderer = _RecordingRenderer()

    await _loop(ctx, _FakeTransport(), renderer).tick()

    snapshot = renderer.snapshots[0]
    assert snapshot.control_state == ControlState.INITIALIZED_BUT_NOT_HOLD
    assert snapshot.emergency is True
    assert snapshot.actual_velocity == VelocityVector(y=0.2)
    assert snapshot.held_keys == frozenset()
