"""Command line entry point.

Usage::

    pybasectl ws://localhost:8439

Controls: W/S forward/backward, A/D left/right, Q/E rotate, Esc or C exits.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from collections.abc import Sequence

from pybasectl import __version__
from pybasectl.config import TeleopConfig
from pybasectl.exceptions import BasectlConfigError, BasectlError
from pybasectl.input.terminal import TerminalKeySource
from pybasectl.loop import LoopOutcome
from pybasectl.models.state import EvictionPolicy
from pybasectl.session import TeleopSession
from pybasectl.ui import NullRenderer, Renderer, RichDashboard

_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pybasectl",
        description="Drive a robot base from the keyboard over WebSocket.",
    )
    parser.add_argument("url", nargs="?", help="WebSocket URL to connect to (e.g. ws://localhost:8439)")
    parser.add_argument("--linear-speed", type=float, help="Linear speed for X and Y axes in m/s")
    parser.add_argument("--angular-speed", type=float, help="Angular speed for the Z axis in rad/s")
    parser.add_argument(
        "--per-key-eviction",
        action="store_true",
        help="Use a release window per key instead of one shared window",
    )
    parser.add_argument("--headless", action="store_true", help="Do not draw the dashboard; log to stderr")
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if args.verbose else logging.INFO
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if args.log_file:
        logging.basicConfig(filename=args.log_file, level=level, format=fmt)
    elif args.headless:
        logging.basicConfig(stream=sys.stderr, level=level, format=fmt)
    else:
        # Anything on stderr would tear the live dashboard.
        logging.basicConfig(handlers=[logging.NullHandler()], level=level)


def config_from_args(args: argparse.Namespace) -> TeleopConfig:
    overrides: dict[str, object] = {}
    if args.url:
        overrides["url"] = args.url
    if args.linear_speed is not None:
        overrides["linear_speed"] = args.linear_speed
    if args.angular_speed is not None:
        overrides["angular_speed"] = args.angular_speed
    if args.per_key_eviction:
        overrides["eviction_policy"] = EvictionPolicy.PER_KEY
    return TeleopConfig.from_env(**overrides)


async def _run(config: TeleopConfig, renderer: Renderer) -> LoopOutcome:
    with TerminalKeySource() as keys:
        async with TeleopSession(config) as session:
            return await session.run(keys, renderer)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args)

    try:
        config = config_from_args(args)
    except BasectlConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    dashboard = None if args.headless else RichDashboard()
    try:
        with dashboard if dashboard is not None else contextlib.nullcontext():
            outcome = asyncio.run(_run(config, dashboard or NullRenderer()))
    except KeyboardInterrupt:
        # Interrupts skip the release command.
        _logger.info("Interrupted")
        return EXIT_INTERRUPTED
    except BasectlError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    return EXIT_OK if outcome == LoopOutcome.RELEASED else EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
