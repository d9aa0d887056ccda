"""Inbound frame receiver."""

from __future__ import annotations

import logging

from pybasectl._codec import FrameCodec
from pybasectl._transport import Transport
from pybasectl.exceptions import BasectlDecodeError, BasectlTransportError
from pybasectl.state.tracker import SessionStateTracker

_logger = logging.getLogger(__name__)


async def receive_frames(
    transport: Transport,
    codec: FrameCodec,
    tracker: SessionStateTracker,
) -> int:
    """Decode frames as they arrive and apply them to the tracker.

    Runs until the channel closes.  A frame that fails to decode ends the
    receiver; the last applied state stays in place.

    Returns the number of frames applied.
    """
    applied = 0
    try:
        async for payload in transport.frames():
            frame = codec.decode(payload)
            tracker.apply(frame)
            applied += 1
    except BasectlDecodeError:
        _logger.error("Dropping receiver after undecodable frame", exc_info=True)
    except BasectlTransportError:
        _logger.warning("Receiver stopped on transport error", exc_info=True)
    else:
        _logger.debug("Receiver reached end of stream after %d frames", applied)
    return applied
