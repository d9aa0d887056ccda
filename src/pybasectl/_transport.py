"""WebSocket transport carrying binary frames to and from the base."""

from __future__ import annotations

import logging
import socket
from collections.abc import AsyncIterator
from typing import Protocol

import aiohttp

from pybasectl.exceptions import BasectlTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the loop and the receiver.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`WebSocketTransport`) concrete.
    """

    async def send(self, payload: bytes) -> None: ...

    def frames(self) -> AsyncIterator[bytes]: ...

    async def close(self) -> None: ...


class WebSocketTransport:
    """Duplex binary channel over an aiohttp WebSocket."""

    def __init__(
        self,
        url: str,
        http_session: aiohttp.ClientSession,
        *,
        tcp_nodelay: bool = True,
    ) -> None:
        self._url = url
        self._http = http_session
        self._tcp_nodelay = tcp_nodelay
        self._ws: aiohttp.ClientWebSocketResponse | None = None

    async def connect(self) -> None:
        """Perform the WebSocket handshake."""
        _logger.debug("Connecting to %s", self._url)
        try:
            self._ws = await self._http.ws_connect(self._url)
        except (aiohttp.ClientError, OSError) as exc:
            raise BasectlTransportError(
                f"Error during websocket handshake with {self._url}: {exc}",
                url=self._url,
            ) from exc

        if self._tcp_nodelay:
            self._set_nodelay()
        _logger.debug("Connected to %s", self._url)

    def _set_nodelay(self) -> None:
        ws = self._ws
        sock = ws.get_extra_info("socket") if ws is not None else None
        if sock is None:
            return
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            # TLS or non-TCP sockets may refuse the option.
            _logger.debug("TCP_NODELAY not applied", exc_info=True)

    def _require_ws(self) -> aiohttp.ClientWebSocketResponse:
        if self._ws is None:
            raise BasectlTransportError("Transport not connected. Call connect() first.", url=self._url)
        return self._ws

    async def send(self, payload: bytes) -> None:
        ws = self._require_ws()
        if ws.closed:
            raise BasectlTransportError("WebSocket is closed", url=self._url)
        try:
            await ws.send_bytes(payload)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            raise BasectlTransportError(f"Send to {self._url} failed: {exc}", url=self._url) from exc

    async def frames(self) -> AsyncIterator[bytes]:
        """Yield binary frames until the channel closes.

        Text, ping and pong messages are skipped.  A protocol error ends
        iteration with :class:`BasectlTransportError`.
        """
        ws = self._require_ws()
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.BINARY:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise BasectlTransportError(
                    f"WebSocket error from {self._url}: {ws.exception()}",
                    url=self._url,
                )
            else:
                _logger.debug("Ignoring %s message", msg.type.name)
        _logger.debug("WebSocket closed code=%s", ws.close_code)

    async def close(self) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            return
        _logger.debug("Closing WebSocket to %s", self._url)
        await ws.close()
