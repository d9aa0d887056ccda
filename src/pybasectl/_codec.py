"""Frame codec: wire models to binary frames and back."""

from __future__ import annotations

import json
import logging
from typing import Protocol

from pydantic import ValidationError

from pybasectl.exceptions import BasectlDecodeError
from pybasectl.models.wire import ApiDown, ApiUp

_logger = logging.getLogger(__name__)


class FrameCodec(Protocol):
    """Structural codec interface.

    The command loop and the receiver only depend on this protocol, so a
    different binary contract can be plugged in without touching them.
    """

    def encode(self, message: ApiDown) -> bytes: ...

    def decode(self, payload: bytes) -> ApiUp: ...


class JsonFrameCodec:
    """Compact UTF-8 JSON carried in binary frames."""

    def encode(self, message: ApiDown) -> bytes:
        return json.dumps(message.to_wire(), separators=(",", ":")).encode("utf-8")

    def decode(self, payload: bytes) -> ApiUp:
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BasectlDecodeError(f"Frame is not UTF-8: {payload[:32]!r}", payload=payload) from exc

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BasectlDecodeError(f"Frame is not JSON: {text[:64]}", payload=payload) from exc

        if not isinstance(raw, dict):
            raise BasectlDecodeError("Frame is not a JSON object", payload=payload)

        try:
            frame = ApiUp.model_validate(raw)
        except ValidationError as exc:
            raise BasectlDecodeError(f"Frame does not match ApiUp: {exc}", payload=payload) from exc

        _logger.debug("Decoded frame session_id=%s status=%s", frame.session_id, frame.base_status is not None)
        return frame
