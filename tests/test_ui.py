from __future__ import annotations

import io

import pytest
from rich.console import Console

from pybasectl.models.state import ControlState, ErrorNotice, KeyId, Snapshot
from pybasectl.models.velocity import VelocityVector
from pybasectl.ui import NullRenderer, RichDashboard, build_dashboard, status_line


def _render_text(snapshot: Snapshot) -> str:
    console = Console(file=io.StringIO(), record=True, width=100, color_system=None)
    console.print(build_dashboard(snapshot))
    return console.export_text()


@pytest.mark.parametrize(
    ("snapshot", "expected"),
    [
        (Snapshot(), "Status: Initializing..."),
        (Snapshot(control_state=ControlState.CAN_MOVE), "Status: Ready to Move"),
        (Snapshot(control_state=ControlState.INITIALIZED_BUT_NOT_HOLD), "Status: NO CONTROL"),
        (
            Snapshot(
                control_state=ControlState.INITIALIZED_BUT_NOT_HOLD,
                error_notice=ErrorNotice(message="Control in hands of another user", raised_at=1.0),
            ),
            "Warn: Control in hands of another user",
        ),
        (
            Snapshot(
                control_state=ControlState.CAN_MOVE,
                error_notice=ErrorNotice(message="Protocol version mismatch", raised_at=1.0),
            ),
            "Warn: Protocol version mismatch",
        ),
        (
            Snapshot(
                control_state=ControlState.UNINITIALIZED,
                emergency=True,
                error_notice=ErrorNotice(message="Emergency Stop: {}", raised_at=1.0),
            ),
            "EMERGENCY STOP: Emergency Stop: {}",
        ),
    ],
)
def test_status_line(snapshot: Snapshot, expected: str) -> None:
    text, _style = status_line(snapshot)
    assert text == expected


def test_dashboard_waits_for_actual_speed() -> None:
    text = _render_text(Snapshot(target_velocity=VelocityVector(x=0.1)))
    assert "Waiting for data..." in text
    assert "+0.100 m/s" in text
    assert "Robot Base Advanced Control" in text


def test_dashboard_shows_actual_speed() -> None:
    text = _render_text(
        Snapshot(
            control_state=ControlState.CAN_MOVE,
            actual_velocity=VelocityVector(z=-0.5),
            held_keys=frozenset({KeyId.ROTATE_RIGHT}),
        )
    )
    assert "Waiting for data..." not in text
    assert "-0.500 rad/s" in text
    assert "Rotate Right" in text


def test_renderers_accept_snapshots_without_terminal() -> None:
    NullRenderer().render(Snapshot())
    # Not started: render is a no-op.
    RichDashboard(Console(file=io.StringIO())).render(Snapshot())
