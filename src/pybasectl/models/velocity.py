"""Three-axis velocity value."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class VelocityVector(BaseModel):
    """Planar base velocity.

    ``x`` and ``y`` are linear components in m/s, ``z`` is the yaw rate
    in rad/s.  The zero vector is the safe default.
    """

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> VelocityVector:
        return cls()

    @property
    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0
