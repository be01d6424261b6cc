"""
OpenShock Actuation
===================

Builds control requests for the OpenShock API and sends them from a
bounded background queue. Sending is fire-and-forget: failures are counted
and dropped, never raised to the caller.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp

from . import __version__
from .config import DEFAULT_API_URL, ShockSettings

logger = logging.getLogger(__name__)

CONTROL_PATH = "/2/shockers/control"
REQUEST_TIMEOUT = 5.0
USER_AGENT = f"VintageShock/{__version__}"
DEFAULT_QUEUE_SIZE = 8


def control_url(api_url: Optional[str]) -> str:
    """Control endpoint for an API base URL."""
    return (api_url or DEFAULT_API_URL).rstrip("/") + CONTROL_PATH


@dataclass(frozen=True)
class ShockCommand:
    """One actuation: a shock on a single device."""

    device_id: str
    intensity: int
    duration_ms: int
    api_url: str = DEFAULT_API_URL
    api_token: str = ""
    reason: str = ""  # event kind or "test"
    shock_type: str = "Shock"

    @classmethod
    def from_settings(
        cls,
        settings: ShockSettings,
        intensity: int,
        duration_sec: float,
        reason: str = "",
    ) -> 'ShockCommand':
        return cls(
            device_id=settings.device_id,
            intensity=max(0, min(100, int(intensity))),
            duration_ms=max(0, int(duration_sec * 1000)),
            api_url=settings.api_url,
            api_token=settings.api_token,
            reason=reason,
        )

    @property
    def url(self) -> str:
        return control_url(self.api_url)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "shocks": [{
                "id": self.device_id,
                "type": self.shock_type,
                "intensity": self.intensity,
                "duration": self.duration_ms,
            }]
        }

    def headers(self, user_agent: str = USER_AGENT) -> Dict[str, str]:
        return {
            "Open-Shock-Token": self.api_token,
            "Accept": "application/json",
            "User-Agent": user_agent,
        }


class OpenShockClient:
    """Thin aiohttp client for the shocker control endpoint."""

    def __init__(
        self,
        user_agent: str = USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def send(self, command: ShockCommand) -> Optional[int]:
        """
        POST the command. Returns the HTTP status, or None if the request
        never completed. Never raises for network errors.
        """
        session = await self._get_session()
        try:
            async with session.post(
                command.url,
                json=command.to_payload(),
                headers=command.headers(self.user_agent),
            ) as response:
                return response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"Shock request to {command.url} failed: {e!r}")
            return None

    async def close(self):
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


@dataclass
class ActuationStats:
    """Counters for the dispatch queue."""

    submitted: int = 0
    sent: int = 0
    failed: int = 0
    dropped: int = 0
    last_status: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "submitted": self.submitted,
            "sent": self.sent,
            "failed": self.failed,
            "dropped": self.dropped,
            "last_status": self.last_status,
        }


class ActuationQueue:
    """
    Bounded queue drained by a single worker task.

    ``submit`` never blocks: when the queue is full, or the worker is not
    running, the command is dropped and counted. Must be started and fed
    from the event loop thread.
    """

    def __init__(
        self,
        client: Optional[OpenShockClient] = None,
        maxsize: int = DEFAULT_QUEUE_SIZE,
    ):
        self.client = client or OpenShockClient()
        self.maxsize = maxsize
        self.stats = ActuationStats()
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self):
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.maxsize)
        self._worker = asyncio.create_task(self._run())
        logger.debug("Actuation queue started")

    async def stop(self, drain: bool = True):
        """Stop the worker, optionally waiting for queued commands first."""
        if self._queue is not None and drain and self.running:
            await self._queue.join()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        self._queue = None
        await self.client.close()

    def submit(self, command: ShockCommand) -> bool:
        """Queue a command. Returns False if it was dropped."""
        self.stats.submitted += 1
        if self._queue is None or not self.running:
            self.stats.dropped += 1
            logger.warning("Actuation queue not running, dropping shock")
            return False
        try:
            self._queue.put_nowait(command)
        except asyncio.QueueFull:
            self.stats.dropped += 1
            logger.debug("Actuation queue full, dropping shock")
            return False
        return True

    async def join(self):
        """Wait until every queued command has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def _run(self):
        queue = self._queue
        while True:
            command = await queue.get()
            try:
                status = await self.client.send(command)
                self.stats.last_status = status
                if status is not None and 200 <= status < 300:
                    self.stats.sent += 1
                else:
                    self.stats.failed += 1
            finally:
                queue.task_done()
