"""Builders for the outgoing command frames.

These are the whole vocabulary the command loop speaks.  They are pure:
no I/O, no clock, no shared state.
"""

from __future__ import annotations

from pybasectl.models.velocity import VelocityVector
from pybasectl.models.wire import ApiDown, BaseCommand, ReportFrequency, XyzSpeed


def create_set_frequency_msg(frequency: ReportFrequency) -> ApiDown:
    """Ask the base to push status reports at *frequency*."""
    return ApiDown(set_report_frequency=ReportFrequency(frequency))


def create_init_msg() -> ApiDown:
    """Acquire API control.  Resending while already initialized is harmless."""
    return ApiDown(base_command=BaseCommand(api_control_initialize=True))


def create_move_msg(speed_x: float, speed_y: float, speed_z: float) -> ApiDown:
    """Command a velocity; the zero vector means "hold position"."""
    return ApiDown(
        base_command=BaseCommand(
            simple_move_command=XyzSpeed(speed_x=speed_x, speed_y=speed_y, speed_z=speed_z),
        )
    )


def create_move_msg_from_vector(vector: VelocityVector) -> ApiDown:
    return ApiDown(base_command=BaseCommand(simple_move_command=XyzSpeed.from_vector(vector)))


def create_close_msg() -> ApiDown:
    """Release API control."""
    return ApiDown(base_command=BaseCommand(api_control_initialize=False))
