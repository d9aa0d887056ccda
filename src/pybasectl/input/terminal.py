"""Raw terminal keyboard source."""

from __future__ import annotations

import asyncio
import logging
import os
import select
import sys
import termios
import tty
from typing import Any, TextIO

from pybasectl.exceptions import BasectlInputError
from pybasectl.models.state import KeyId

_logger = logging.getLogger(__name__)

_ESC = b"\x1b"

DEFAULT_KEYMAP: dict[bytes, KeyId] = {
    b"w": KeyId.FORWARD,
    b"s": KeyId.BACKWARD,
    b"a": KeyId.LEFT,
    b"d": KeyId.RIGHT,
    b"q": KeyId.ROTATE_LEFT,
    b"e": KeyId.ROTATE_RIGHT,
    b"c": KeyId.TERMINATE,
    _ESC: KeyId.TERMINATE,
}

_ARROWS: dict[bytes, KeyId] = {
    b"A": KeyId.FORWARD,
    b"B": KeyId.BACKWARD,
    b"C": KeyId.RIGHT,
    b"D": KeyId.LEFT,
}


class TerminalKeySource:
    """Reads single key presses from a TTY in cbreak mode.

    The blocking ``select`` runs in a worker thread so the event loop is
    never held; each poll is bounded by its timeout.

    Usage::

        with TerminalKeySource() as keys:
            await debouncer.run(keys)
    """

    def __init__(self, stream: TextIO | None = None, *, keymap: dict[bytes, KeyId] | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._keymap = keymap if keymap is not None else DEFAULT_KEYMAP
        self._fd: int | None = None
        self._saved_attrs: list[Any] | None = None

    def open(self) -> None:
        if not self._stream.isatty():
            raise BasectlInputError("stdin is not a TTY")
        fd = self._stream.fileno()
        try:
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except termios.error as exc:
            raise BasectlInputError(f"Cannot switch terminal to cbreak mode: {exc}") from exc
        self._fd = fd

    def close(self) -> None:
        fd, saved = self._fd, self._saved_attrs
        self._fd = None
        self._saved_attrs = None
        if fd is None or saved is None:
            return
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        except termios.error:
            _logger.debug("Terminal restore failed", exc_info=True)

    def __enter__(self) -> TerminalKeySource:
        self.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    async def poll(self, timeout: float) -> KeyId | None:
        return await asyncio.to_thread(self._read_key, timeout)

    def _read1(self, fd: int, timeout: float) -> bytes | None:
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return None
        ch = os.read(fd, 1)
        if not ch:
            raise BasectlInputError("stdin closed")
        return ch

    def _read_key(self, timeout: float) -> KeyId | None:
        fd = self._fd
        if fd is None:
            raise BasectlInputError("Key source not open. Call open() first.")

        ch = self._read1(fd, timeout)
        if ch is None:
            return None

        if ch == _ESC:
            follow = self._read1(fd, 0.02)
            if follow is None:
                return self._keymap.get(_ESC, KeyId.OTHER)
            if follow in (b"[", b"O"):
                return self._read_escape_sequence(fd)
            # Alt-modified key.
            return KeyId.OTHER

        return self._keymap.get(ch.lower(), KeyId.OTHER)

    def _read_escape_sequence(self, fd: int) -> KeyId:
        # Parameter bytes 0x30-0x3F run until a final byte in 0x40-0x7E.
        while True:
            byte = self._read1(fd, 0.04)
            if byte is None:
                return KeyId.OTHER
            if 0x40 <= byte[0] <= 0x7E:
                return _ARROWS.get(byte, KeyId.OTHER)
            if not 0x20 <= byte[0] <= 0x3F:
                return KeyId.OTHER
