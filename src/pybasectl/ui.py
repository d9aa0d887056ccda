"""Terminal dashboard built on ``rich``."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pybasectl.models.state import ControlState, KeyId, Snapshot
from pybasectl.models.velocity import VelocityVector

_logger = logging.getLogger(__name__)

_KEY_HINTS: tuple[tuple[tuple[str, KeyId, str], ...], ...] = (
    (("W", KeyId.FORWARD, "Forward"), ("S", KeyId.BACKWARD, "Backward")),
    (("A", KeyId.LEFT, "Left"), ("D", KeyId.RIGHT, "Right")),
    (("Q", KeyId.ROTATE_LEFT, "Rotate Left"), ("E", KeyId.ROTATE_RIGHT, "Rotate Right")),
)

_HELD_STYLE = "bold black on green"
_IDLE_STYLE = "grey62"
_WARN_STYLE = "bold yellow"


class Renderer(Protocol):
    """Presentation boundary: called once per command loop tick."""

    def render(self, snapshot: Snapshot) -> None: ...


class NullRenderer:
    """Renderer for headless runs."""

    def render(self, snapshot: Snapshot) -> None:
        return None


def status_line(snapshot: Snapshot) -> tuple[str, str]:
    """Status text and style for *snapshot*.

    Emergency wins over everything, then the notice (if any), then the
    plain control state.
    """
    notice = snapshot.error_notice
    if snapshot.emergency:
        return f"EMERGENCY STOP: {notice.message}", "bold red"
    if snapshot.control_state == ControlState.UNINITIALIZED:
        return "Status: Initializing...", "cyan"
    if not notice.is_empty:
        return f"Warn: {notice.message}", _WARN_STYLE
    if snapshot.control_state == ControlState.INITIALIZED_BUT_NOT_HOLD:
        return "Status: NO CONTROL", _WARN_STYLE
    return "Status: Ready to Move", "bold green"


def _velocity_table(velocity: VelocityVector) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(style=_IDLE_STYLE)
    table.add_column(style="white")
    table.add_row("X:", f"{velocity.x:+.3f} m/s")
    table.add_row("Y:", f"{velocity.y:+.3f} m/s")
    table.add_row("Z:", f"{velocity.z:+.3f} rad/s")
    return table


def _controls(held: frozenset[KeyId]) -> Text:
    text = Text()
    for row in _KEY_HINTS:
        for label, key, description in row:
            text.append("[", style="white")
            text.append(label, style=_HELD_STYLE if key in held else _IDLE_STYLE)
            text.append("]", style="white")
            text.append(f" {description:<14}", style="white")
        text.append("\n")
    text.append("[ESC/C]", style="red")
    text.append(" Exit", style="white")
    return text


def build_dashboard(snapshot: Snapshot) -> Group:
    """Full dashboard renderable for one snapshot."""
    speeds = Table.grid(expand=True)
    speeds.add_column(ratio=1)
    speeds.add_column(ratio=1)
    actual: Any = (
        _velocity_table(snapshot.actual_velocity)
        if snapshot.actual_velocity is not None
        else Text("Waiting for data...", style=_IDLE_STYLE)
    )
    speeds.add_row(
        Panel(_velocity_table(snapshot.target_velocity), title="Target Speed"),
        Panel(actual, title="Actual Speed"),
    )

    text, style = status_line(snapshot)
    highlighted = (
        snapshot.emergency
        or not snapshot.error_notice.is_empty
        or snapshot.control_state == ControlState.INITIALIZED_BUT_NOT_HOLD
    )
    status = Panel(
        Text(text, style=style, justify="center"),
        title="Robot Status",
        border_style=style if highlighted else "none",
    )

    return Group(
        Panel(Text("Robot Base Advanced Control", style="bold cyan", justify="center")),
        Panel(_controls(snapshot.held_keys), title="Keyboard Controls"),
        speeds,
        status,
    )


class RichDashboard:
    """Live-updating dashboard on the alternate screen.

    Usage::

        with RichDashboard() as ui:
            ui.render(snapshot)
    """

    def __init__(self, console: Console | None = None, *, refresh_per_second: float = 30.0) -> None:
        self._console = console or Console()
        self._refresh_per_second = refresh_per_second
        self._live: Live | None = None

    def start(self) -> None:
        if self._live is not None:
            return
        live = Live(
            build_dashboard(Snapshot()),
            console=self._console,
            screen=True,
            refresh_per_second=self._refresh_per_second,
        )
        live.start()
        self._live = live

    def stop(self) -> None:
        live = self._live
        self._live = None
        if live is not None:
            live.stop()

    def __enter__(self) -> RichDashboard:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()

    def render(self, snapshot: Snapshot) -> None:
        if self._live is None:
            return
        self._live.update(build_dashboard(snapshot))
