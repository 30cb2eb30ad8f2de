"""Custom exception hierarchy for pytrainmap."""

from __future__ import annotations


class TrainmapError(Exception):
    """Base exception for all pytrainmap errors."""


class TrainmapConfigError(TrainmapError):
    """Invalid or missing configuration."""


class TrainmapFeedError(TrainmapError):
    """The realtime feed could not be (re)established.

    Raised once ``max_reconnect_attempts`` consecutive connection attempts
    have failed.  Message handling problems are never reported this way;
    they are logged and the offending message is skipped.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        attempts: int = 0,
    ) -> None:
        self.url = url
        self.attempts = attempts
        super().__init__(message)
