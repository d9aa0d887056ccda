"""Custom exception hierarchy for pybasectl."""

from __future__ import annotations


class BasectlError(Exception):
    """Base exception for all pybasectl errors."""


class BasectlConfigError(BasectlError):
    """Invalid or missing configuration."""


class BasectlTransportError(BasectlError):
    """Channel-level failure (connect, send, receive)."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class BasectlDecodeError(BasectlError):
    """Inbound frame could not be decoded into a status report.

    Treated as fatal to the receiver: no attempt is made to recover
    partially decoded frames.
    """

    def __init__(self, message: str, *, payload: bytes = b"") -> None:
        self.payload = payload
        super().__init__(message)


class BasectlInputError(BasectlError):
    """Keyboard input source failure (terminal closed, not a TTY, ...)."""
