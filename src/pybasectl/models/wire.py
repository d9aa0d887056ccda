"""Uplink and downlink wire models.

Downlink (client → base) frames are :class:`ApiDown` and carry exactly one
of ``setReportFrequency`` or ``baseCommand``.  A :class:`BaseCommand` in
turn carries exactly one of ``apiControlInitialize`` (``true`` acquires,
``false`` releases control) or ``simpleMoveCommand``.

Uplink (base → client) frames are :class:`ApiUp`.  Only the base status
arm is interpreted; other status kinds decode with ``base_status=None``.
"""

from __future__ import annotations

from typing import Any

from pydantic import model_validator

from pybasectl.models._base import WireEnum, WireModel
from pybasectl.models.velocity import VelocityVector

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class ReportFrequency(WireEnum):
    """Rate at which the base pushes status frames."""

    UNSPECIFIED = 0
    RF_10HZ = 1
    RF_20HZ = 2
    RF_50HZ = 3
    RF_100HZ = 4


# ------------------------------------------------------------------
# Shared payloads
# ------------------------------------------------------------------


class XyzSpeed(WireModel):
    """Velocity triple as carried on the wire."""

    speed_x: float = 0.0
    speed_y: float = 0.0
    speed_z: float = 0.0

    @classmethod
    def from_vector(cls, vector: VelocityVector) -> XyzSpeed:
        return cls(speed_x=vector.x, speed_y=vector.y, speed_z=vector.z)

    def to_vector(self) -> VelocityVector:
        return VelocityVector(x=self.speed_x, y=self.speed_y, z=self.speed_z)


# ------------------------------------------------------------------
# Downlink
# ------------------------------------------------------------------


class BaseCommand(WireModel):
    """Command addressed to the base controller."""

    api_control_initialize: bool | None = None
    simple_move_command: XyzSpeed | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> BaseCommand:
        arms = [self.api_control_initialize, self.simple_move_command]
        if sum(arm is not None for arm in arms) != 1:
            raise ValueError("BaseCommand requires exactly one command")
        return self


class ApiDown(WireModel):
    """Outgoing frame."""

    set_report_frequency: ReportFrequency | None = None
    base_command: BaseCommand | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> ApiDown:
        if (self.set_report_frequency is None) == (self.base_command is None):
            raise ValueError("ApiDown requires exactly one of setReportFrequency or baseCommand")
        return self


# ------------------------------------------------------------------
# Uplink
# ------------------------------------------------------------------


class BaseStatus(WireModel):
    """Periodic base status report."""

    api_control_initialized: bool = False
    session_holder: int = 0
    parking_stop_detail: dict[str, Any] | None = None
    """Present (possibly empty) while the base is parked or emergency-stopped."""
    estimated_odometry: XyzSpeed | None = None

    @property
    def parking(self) -> bool:
        return self.parking_stop_detail is not None


class ApiUp(WireModel):
    """Incoming frame."""

    session_id: int = 0
    """Session identity the base assigned to this connection."""
    protocol_major_version: int = 0
    log: Any = None
    base_status: BaseStatus | None = None
