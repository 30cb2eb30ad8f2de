"""Engine configuration for pytrainmap."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

from pytrainmap.exceptions import TrainmapConfigError

DEFAULT_WS_URL = "wss://trainmap.pv.lv/ws"

_VALID_SCHEMES = frozenset({"ws", "wss", "http", "https"})


def _parse_number(env_key: str, value: str, cast: Callable[[str], Any]) -> Any:
    try:
        return cast(value.strip())
    except ValueError as exc:
        raise TrainmapConfigError(f"{env_key} must be numeric, got {value!r}") from exc


def _optional(cast: Callable[[str], Any]) -> Callable[[str], Any]:
    def parse(value: str) -> Any:
        if value.lower() in {"", "none", "off"}:
            return None
        return cast(value)

    return parse


@dataclasses.dataclass(frozen=True)
class TrainmapConfig:
    """Engine configuration.

    Parameters
    ----------
    ws_url : str
        Realtime websocket endpoint delivering JSON messages.
    reconnect_delay : float
        Seconds to wait after a disconnect before reconnecting.
    max_reconnect_attempts : int or None
        Consecutive failed connection attempts tolerated before the feed
        gives up with :class:`TrainmapFeedError`.  ``None`` retries forever.
    countdown_interval : float
        Countdown timer period in seconds.
    max_arrivals : int
        How many upcoming arrivals are ranked and rendered.
    storage_path : str or None
        JSON file backing the key-value store.  ``None`` keeps the
        station cache and selection in memory only.
    debug_buffer_size : int
        Number of log records kept by :class:`pytrainmap._log.DebugBuffer`.
    heartbeat : float or None
        Websocket ping interval in seconds, ``None`` disables pings.
    """

    ws_url: str = DEFAULT_WS_URL
    reconnect_delay: float = 5.0
    max_reconnect_attempts: int | None = None
    countdown_interval: float = 1.0
    max_arrivals: int = 3
    storage_path: str | None = None
    debug_buffer_size: int = 100
    heartbeat: float | None = 30.0

    def __post_init__(self) -> None:
        scheme = urlparse(self.ws_url).scheme
        if scheme not in _VALID_SCHEMES:
            raise TrainmapConfigError(f"Unsupported feed URL scheme: {self.ws_url!r}")
        if self.max_arrivals < 1:
            raise TrainmapConfigError("max_arrivals must be at least 1")
        if self.countdown_interval <= 0:
            raise TrainmapConfigError("countdown_interval must be positive")
        if self.reconnect_delay < 0:
            raise TrainmapConfigError("reconnect_delay must not be negative")
        if self.max_reconnect_attempts is not None and self.max_reconnect_attempts < 1:
            raise TrainmapConfigError("max_reconnect_attempts must be at least 1 or None")

    @classmethod
    def from_env(cls, **overrides: Any) -> TrainmapConfig:
        """Create configuration from ``TRAINMAP_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "TRAINMAP_WS_URL": ("ws_url", str),
            "TRAINMAP_RECONNECT_DELAY": ("reconnect_delay", float),
            "TRAINMAP_MAX_RECONNECT_ATTEMPTS": ("max_reconnect_attempts", _optional(int)),
            "TRAINMAP_COUNTDOWN_INTERVAL": ("countdown_interval", float),
            "TRAINMAP_MAX_ARRIVALS": ("max_arrivals", int),
            "TRAINMAP_STORAGE_PATH": ("storage_path", str),
            "TRAINMAP_DEBUG_BUFFER_SIZE": ("debug_buffer_size", int),
            "TRAINMAP_HEARTBEAT": ("heartbeat", _optional(float)),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, cast) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            if cast is str:
                config_kwargs[field_name] = val.strip()
            else:
                config_kwargs[field_name] = _parse_number(env_key, val, cast)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
