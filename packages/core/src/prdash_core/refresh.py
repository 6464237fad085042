"""Background refresh: poll timer plus push-triggered refetches.

Triggers (timer ticks, push events) go into a queue drained by a single
consumer task. The consumer fetches a complete Snapshot off the event loop
and hands it over in one call, so the engine never sees a half-built
snapshot. Triggers that pile up while a fetch is running collapse into one
follow-up fetch.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Callable

from prdash_core.models import Snapshot

logger = logging.getLogger(__name__)

REFRESH_EVENT = "prs_updated"


def is_refresh_event(message: str | bytes) -> bool:
    """Return True for a push message announcing that the PR list changed."""
    try:
        payload = json.loads(message)
    except (TypeError, ValueError):
        return False
    return isinstance(payload, dict) and payload.get("type") == REFRESH_EVENT


class RefreshScheduler:
    def __init__(
        self,
        fetch: Callable[[], Snapshot],
        on_snapshot: Callable[[Snapshot], None],
        poll_interval: float = 30,
    ):
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._poll_interval = poll_interval
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []
        self.snapshot: Snapshot | None = None
        self.refresh_count = 0

    def request_refresh(self, reason: str = "manual") -> None:
        self._queue.put_nowait(reason)

    def handle_push_message(self, message: str | bytes) -> bool:
        """Queue a refresh if ``message`` is a refresh event. Other payloads are ignored."""
        if not is_refresh_event(message):
            return False
        self.request_refresh("push")
        return True

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            self.request_refresh("poll")

    def _drain(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()

    async def _consume(self, max_refreshes: int | None) -> None:
        while max_refreshes is None or self.refresh_count < max_refreshes:
            reason = await self._queue.get()
            self._drain()
            try:
                snapshot = await asyncio.to_thread(self._fetch)
            except Exception as e:
                # Keep showing the previous snapshot; the next trigger retries.
                logger.warning("Refresh (%s) failed: %s", reason, e)
                continue
            self.snapshot = snapshot
            self.refresh_count += 1
            logger.debug("Refresh (%s) delivered %d pull requests", reason, len(snapshot.prs))
            try:
                self._on_snapshot(snapshot)
            except Exception:
                logger.exception("Snapshot handler failed after refresh (%s)", reason)

    async def run(self, max_refreshes: int | None = None, refresh_on_start: bool = True) -> None:
        """Run until stop() is called, or until ``max_refreshes`` snapshots were delivered."""
        if refresh_on_start:
            self.request_refresh("startup")
        consumer = asyncio.create_task(self._consume(max_refreshes))
        poller = asyncio.create_task(self._poll())
        self._tasks = [consumer, poller]
        try:
            await consumer
        except asyncio.CancelledError:
            pass
        finally:
            self.stop()

    def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks = []
