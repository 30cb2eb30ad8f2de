"""Websocket feed adapter.

Connects to the realtime endpoint with aiohttp, decodes each frame and
hands it to a single message callback.  Disconnects are retried after a
fixed delay; delivery is at-least-once with possible gaps, which the
engine tolerates.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pytrainmap.config import TrainmapConfig
from pytrainmap.exceptions import TrainmapFeedError

_logger = logging.getLogger(__name__)

STATUS_CONNECTING = "Connecting websocket..."
STATUS_OPEN = "WS open"


def decode_feed_payload(data: str | bytes) -> Any:
    """Decode a frame as JSON; undecodable payloads are returned unchanged."""
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError:
            return data
    try:
        return json.loads(data)
    except ValueError:
        return data


def retry_status(delay: float) -> str:
    return f"WS closed, retrying in {delay:g}s"


class StationFeed:
    """Reconnecting websocket reader."""

    def __init__(
        self,
        config: TrainmapConfig,
        on_message: Callable[[Any], None],
        *,
        on_status: Callable[[str], None] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._on_message = on_message
        self._on_status = on_status
        self._http_session = session
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._stopping = False

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    def _status(self, text: str) -> None:
        if self._on_status is not None:
            self._on_status(text)

    def _dispatch(self, data: str | bytes) -> None:
        message = decode_feed_payload(data)
        try:
            self._on_message(message)
        except Exception:
            _logger.debug("Feed message handler failed", exc_info=True)

    async def _consume(self, session: aiohttp.ClientSession) -> None:
        async with session.ws_connect(self._config.ws_url, heartbeat=self._config.heartbeat) as ws:
            self._ws = ws
            self._status(STATUS_OPEN)
            _logger.info("Feed connected url=%s", self._config.ws_url)
            try:
                async for msg in ws:
                    if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                        self._dispatch(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        _logger.debug("Feed websocket error: %s", ws.exception())
                        break
                    if self._stopping:
                        break
            finally:
                self._ws = None

    async def run(self) -> None:
        """Read the feed until :meth:`stop` is called.

        Raises
        ------
        TrainmapFeedError
            After ``max_reconnect_attempts`` consecutive failed connects.
        """
        self._stopping = False
        owns_session = self._http_session is None
        session = self._http_session or aiohttp.ClientSession()
        failures = 0
        try:
            while not self._stopping:
                self._status(STATUS_CONNECTING)
                try:
                    await self._consume(session)
                    failures = 0
                except aiohttp.WSServerHandshakeError as exc:
                    failures += 1
                    _logger.warning("Feed handshake rejected status=%s url=%s", exc.status, self._config.ws_url)
                except (aiohttp.ClientError, OSError, asyncio.TimeoutError):
                    failures += 1
                    _logger.debug("Feed connection failed attempt=%d", failures, exc_info=True)

                if self._stopping:
                    break
                limit = self._config.max_reconnect_attempts
                if limit is not None and failures >= limit:
                    raise TrainmapFeedError(
                        f"Feed unavailable after {failures} attempts",
                        url=self._config.ws_url,
                        attempts=failures,
                    )
                _logger.info("Feed closed; reconnecting in %ss", self._config.reconnect_delay)
                self._status(retry_status(self._config.reconnect_delay))
                await asyncio.sleep(self._config.reconnect_delay)
        finally:
            if owns_session:
                await session.close()

    async def stop(self) -> None:
        self._stopping = True
        ws = self._ws
        if ws is not None and not ws.closed:
            await ws.close()
