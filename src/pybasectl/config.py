"""Client configuration for pybasectl."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pybasectl import _constants as c
from pybasectl.exceptions import BasectlConfigError
from pybasectl.models.state import EvictionPolicy
from pybasectl.models.wire import ReportFrequency


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class TeleopConfig:
    """Teleoperation configuration.

    Parameters
    ----------
    url : str
        WebSocket URL of the base (e.g. ``"ws://localhost:8439"``).
    linear_speed : float
        Speed in m/s applied on the X/Y axes while a direction key is held.
    angular_speed : float
        Yaw rate in rad/s applied while a rotate key is held.
    accepted_protocol_major_version : int
        The single protocol major version this client accepts.  Any other
        version is surfaced as a notice while in control; it never blocks
        commands.
    tick_interval : float
        Seconds between two command loop ticks.
    poll_interval : float
        Upper bound in seconds on a single keyboard poll.
    tap_release_timeout : float
        Eviction window after the first press of a key.
    hold_release_timeout : float
        Eviction window once key-repeat has been observed.
    initial_release_timeout : float
        Shared eviction window before any key event was seen.
    eviction_policy : EvictionPolicy
        ``SHARED`` (one timeout for every key) or ``PER_KEY``.
    error_notice_ttl : float
        Seconds before a notice may be cleared by a non-parking status frame.
    release_grace : float
        Seconds to wait after sending the release command before closing.
    report_frequency : ReportFrequency
        Status report rate requested while acquiring control.
    tcp_nodelay : bool
        Disable Nagle on the underlying socket when possible.
    """

    url: str
    linear_speed: float = c.LINEAR_SPEED
    angular_speed: float = c.ANGULAR_SPEED
    accepted_protocol_major_version: int = c.ACCEPTABLE_PROTOCOL_MAJOR_VERSION
    tick_interval: float = c.TICK_INTERVAL
    poll_interval: float = c.POLL_INTERVAL
    tap_release_timeout: float = c.TAP_RELEASE_TIMEOUT
    hold_release_timeout: float = c.HOLD_RELEASE_TIMEOUT
    initial_release_timeout: float = c.INITIAL_RELEASE_TIMEOUT
    eviction_policy: EvictionPolicy = EvictionPolicy.SHARED
    error_notice_ttl: float = c.ERROR_NOTICE_TTL
    release_grace: float = c.RELEASE_GRACE
    report_frequency: ReportFrequency = ReportFrequency.RF_50HZ
    tcp_nodelay: bool = True

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise BasectlConfigError("url must be non-empty")
        if not self.url.startswith(("ws://", "wss://", "http://", "https://")):
            raise BasectlConfigError(f"unsupported url scheme: {self.url}")
        for name in (
            "linear_speed",
            "angular_speed",
            "tick_interval",
            "poll_interval",
            "tap_release_timeout",
            "hold_release_timeout",
            "initial_release_timeout",
            "error_notice_ttl",
        ):
            if not getattr(self, name) > 0:
                raise BasectlConfigError(f"{name} must be > 0")
        if not self.release_grace >= 0:
            raise BasectlConfigError("release_grace must be >= 0")
        try:
            object.__setattr__(self, "eviction_policy", EvictionPolicy(self.eviction_policy))
        except ValueError as exc:
            raise BasectlConfigError(f"unknown eviction policy: {self.eviction_policy!r}") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> TeleopConfig:
        """Create configuration from environment variables.

        Reads ``BASECTL_URL`` and optional ``BASECTL_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TeleopConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_FLOAT_MAP = {
            "BASECTL_LINEAR_SPEED": "linear_speed",
            "BASECTL_ANGULAR_SPEED": "angular_speed",
            "BASECTL_TICK_INTERVAL": "tick_interval",
            "BASECTL_POLL_INTERVAL": "poll_interval",
            "BASECTL_ERROR_NOTICE_TTL": "error_notice_ttl",
            "BASECTL_RELEASE_GRACE": "release_grace",
        }
        config_kwargs: dict[str, Any] = {}

        url = env.get("BASECTL_URL")
        if url is not None:
            config_kwargs["url"] = url

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise BasectlConfigError(f"{env_key} is not a number: {val!r}") from exc

        version_env = env.get("BASECTL_PROTOCOL_MAJOR_VERSION")
        if version_env is not None and "accepted_protocol_major_version" not in overrides:
            try:
                config_kwargs["accepted_protocol_major_version"] = int(version_env)
            except ValueError as exc:
                raise BasectlConfigError(
                    f"BASECTL_PROTOCOL_MAJOR_VERSION is not an integer: {version_env!r}"
                ) from exc

        policy_env = env.get("BASECTL_EVICTION_POLICY")
        if policy_env is not None and "eviction_policy" not in overrides:
            config_kwargs["eviction_policy"] = policy_env.strip().lower()

        if "tcp_nodelay" not in overrides:
            config_kwargs["tcp_nodelay"] = _env_bool(env.get("BASECTL_TCP_NODELAY"), True)

        config_kwargs.update(overrides)
        if "url" not in config_kwargs:
            raise BasectlConfigError("url is required (pass url= or set BASECTL_URL)")

        return cls(**config_kwargs)
