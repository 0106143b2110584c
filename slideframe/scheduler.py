from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from .catalog import Catalog
from .display_state import DisplayState
from .errors import CatalogReadError, EmptyCatalogError, RenderError
from .renderer import RendererGateway

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now().astimezone()


class RotationScheduler:
    """Advances the frame to the next picture inside the daily active window.

    Wakes every poll_seconds; a rotation happens when the local hour lies in
    [start_hour, end_hour] and at least rotation_seconds have passed since the
    last successful one. A failed render commits nothing, so the next wake
    retries the same picture.
    """

    def __init__(
        self,
        catalog: Catalog,
        state: DisplayState,
        gateway: RendererGateway,
        *,
        poll_seconds: float,
        rotation_seconds: float,
        start_hour: int,
        end_hour: int,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._catalog = catalog
        self._state = state
        self._gateway = gateway
        self._poll_seconds = poll_seconds
        self._rotation_interval = timedelta(seconds=rotation_seconds)
        self._start_hour = start_hour
        self._end_hour = end_hour
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._stopping: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None:
            self._stopping = asyncio.Event()
            self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        # Let an in-flight render finish; the renderer has no way to resume a partial draw.
        await self._task
        self._task = None
        self._stopping = None

    async def _loop(self) -> None:
        logger.info(
            "rotation scheduler started: every %s between %02d:00 and %02d:59, polling every %ss",
            self._rotation_interval, self._start_hour, self._end_hour, self._poll_seconds,
        )
        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.tick)
            except Exception:
                logger.exception("rotation tick failed")
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._poll_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info("rotation scheduler stopped")

    def in_active_window(self, now: datetime) -> bool:
        if self._start_hour <= self._end_hour:
            return self._start_hour <= now.hour <= self._end_hour
        # Window wraps past midnight, e.g. 22-6.
        return now.hour >= self._start_hour or now.hour <= self._end_hour

    def is_due(self, now: datetime) -> bool:
        last_rotation = self._state.last_rotation
        return last_rotation is None or now - last_rotation >= self._rotation_interval

    def tick(self, now: datetime | None = None) -> bool:
        """Run one wake cycle. Returns True when a new picture was committed."""
        now = self._clock() if now is None else now
        if not self.in_active_window(now) or not self.is_due(now):
            return False

        try:
            snapshot = self._catalog.refresh()
            index = self._state.advance(snapshot)
        except CatalogReadError as exc:
            logger.warning("skipping rotation: %s", exc)
            return False
        except EmptyCatalogError:
            logger.info("skipping rotation: no pictures stored")
            return False

        try:
            self._gateway.display(
                index,
                snapshot,
                on_success=lambda: self._state.commit_rotation(index, snapshot, now),
            )
        except RenderError as exc:
            logger.warning("rotation to %s failed, will retry next wake: %s", snapshot[index], exc)
            return False

        logger.info("rotated to picture %d (%s)", index, snapshot[index])
        return True
