"""Teleoperation session lifecycle."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from pybasectl._codec import FrameCodec, JsonFrameCodec
from pybasectl._transport import Transport, WebSocketTransport
from pybasectl.config import TeleopConfig
from pybasectl.exceptions import BasectlError
from pybasectl.input.debouncer import KeyDebouncer, KeySource
from pybasectl.loop import CommandLoop, LoopOutcome
from pybasectl.state.context import TeleopContext
from pybasectl.state.receiver import receive_frames
from pybasectl.state.tracker import SessionStateTracker
from pybasectl.ui import NullRenderer, Renderer

_logger = logging.getLogger(__name__)


class TeleopSession:
    """One connection to one base, driven by one operator.

    Usage::

        async with TeleopSession(config) as session:
            outcome = await session.run(keys, renderer)

    The session owns the shared context: it is created on enter and
    discarded on exit.  Closing the channel ends the receiver; the
    terminate key ends the command loop.
    """

    def __init__(
        self,
        config: TeleopConfig,
        *,
        http_session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        codec: FrameCodec | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._external_session = http_session is not None
        self._http_session = http_session
        self._transport = transport
        self._external_transport = transport is not None
        self._codec: FrameCodec = codec or JsonFrameCodec()
        self._clock = clock
        self._context: TeleopContext | None = None
        self._tasks: list[asyncio.Task[Any]] = []

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TeleopSession:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = WebSocketTransport(
                self._config.url,
                self._http_session,
                tcp_nodelay=self._config.tcp_nodelay,
            )
            try:
                await transport.connect()
            except BasectlError:
                await self._close_http()
                raise
            self._transport = transport
        self._context = TeleopContext()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._cancel_tasks()
        if self._transport is not None and not self._external_transport:
            await self._transport.close()
            self._transport = None
        await self._close_http()
        self._context = None

    async def _close_http(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def _cancel_tasks(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def context(self) -> TeleopContext:
        if self._context is None:
            raise BasectlError("Session not started. Use 'async with TeleopSession(...) as session:'")
        return self._context

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise BasectlError("Session not started. Use 'async with TeleopSession(...) as session:'")
        return self._transport

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def build_tracker(self) -> SessionStateTracker:
        return SessionStateTracker(
            self.context,
            accepted_protocol_major_version=self._config.accepted_protocol_major_version,
            error_notice_ttl=self._config.error_notice_ttl,
            clock=self._clock,
        )

    def build_debouncer(self) -> KeyDebouncer:
        cfg = self._config
        return KeyDebouncer(
            self.context,
            linear_speed=cfg.linear_speed,
            angular_speed=cfg.angular_speed,
            poll_interval=cfg.poll_interval,
            tap_release_timeout=cfg.tap_release_timeout,
            hold_release_timeout=cfg.hold_release_timeout,
            initial_release_timeout=cfg.initial_release_timeout,
            policy=cfg.eviction_policy,
            clock=self._clock,
        )

    def build_loop(self, renderer: Renderer) -> CommandLoop:
        cfg = self._config
        return CommandLoop(
            self.context,
            self._require_transport(),
            self._codec,
            renderer,
            tick_interval=cfg.tick_interval,
            release_grace=cfg.release_grace,
            report_frequency=cfg.report_frequency,
        )

    async def run(self, keys: KeySource, renderer: Renderer | None = None) -> LoopOutcome:
        """Start receiver and debouncer, then drive the command loop to completion."""
        transport = self._require_transport()
        self._tasks.append(
            asyncio.create_task(receive_frames(transport, self._codec, self.build_tracker()), name="basectl-receiver")
        )
        self._tasks.append(asyncio.create_task(self.build_debouncer().run(keys), name="basectl-debouncer"))
        try:
            return await self.build_loop(renderer or NullRenderer()).run()
        finally:
            await self._cancel_tasks()
