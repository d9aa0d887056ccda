from __future__ import annotations

import io
import os
from collections.abc import Iterator

import pytest

from pybasectl.exceptions import BasectlInputError
from pybasectl.input.terminal import TerminalKeySource
from pybasectl.models.state import KeyId


@pytest.fixture
def pipe_source() -> Iterator[tuple[TerminalKeySource, int]]:
    read_fd, write_fd = os.pipe()
    source = TerminalKeySource()
    # Bypass open(): a pipe is not a TTY, _read_key only needs the fd.
    source._fd = read_fd  # type: ignore[attr-defined]
    try:
        yield source, write_fd
    finally:
        source._fd = None  # type: ignore[attr-defined]
        os.close(read_fd)
        try:
            os.close(write_fd)
        except OSError:
            pass


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"w", KeyId.FORWARD),
        (b"S", KeyId.BACKWARD),
        (b"a", KeyId.LEFT),
        (b"d", KeyId.RIGHT),
        (b"q", KeyId.ROTATE_LEFT),
        (b"e", KeyId.ROTATE_RIGHT),
        (b"c", KeyId.TERMINATE),
        (b"x", KeyId.OTHER),
        (b"\x1b[A", KeyId.FORWARD),
        (b"\x1b[D", KeyId.LEFT),
        (b"\x1b", KeyId.TERMINATE),
        (b"\x1bOB", KeyId.BACKWARD),
        (b"\x1b[1;5C", KeyId.RIGHT),
        (b"\x1b[1;2D", KeyId.LEFT),
        (b"\x1b[3~", KeyId.OTHER),
        (b"\x1bc", KeyId.OTHER),
        (b"\x1bw", KeyId.OTHER),
    ],
)
def test_key_mapping(pipe_source: tuple[TerminalKeySource, int], data: bytes, expected: KeyId) -> None:
    source, write_fd = pipe_source
    os.write(write_fd, data)
    assert source._read_key(0.1) == expected  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_poll_times_out_without_input(pipe_source: tuple[TerminalKeySource, int]) -> None:
    source, _ = pipe_source
    assert await source.poll(0.01) is None


def test_closed_stdin_raises(pipe_source: tuple[TerminalKeySource, int]) -> None:
    source, write_fd = pipe_source
    os.close(write_fd)
    with pytest.raises(BasectlInputError):
        source._read_key(0.1)  # type: ignore[attr-defined]


def test_open_requires_tty() -> None:
    with pytest.raises(BasectlInputError):
        TerminalKeySource(io.StringIO()).open()


@pytest.mark.parametrize("data", [b"\x1b[1;5C", b"\x1b[1;5A", b"\x1b[15;2~", b"\x1bc"])
def test_escape_sequence_is_consumed_whole(pipe_source: tuple[TerminalKeySource, int], data: bytes) -> None:
    source, write_fd = pipe_source
    os.write(write_fd, data)
    keys = []
    while (key := source._read_key(0.05)) is not None:  # type: ignore[attr-defined]
        keys.append(key)
    assert len(keys) == 1
    assert KeyId.TERMINATE not in keys
