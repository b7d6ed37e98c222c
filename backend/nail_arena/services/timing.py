from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from .combat import BattleSession

logger = logging.getLogger(__name__)


class TimingDriver:
    """Advances a session's timing bar on a fixed interval while it is active."""

    def __init__(self, session: BattleSession, interval_ms: int) -> None:
        self.session = session
        self.interval = interval_ms / 1000
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running or not self.session.timing_active:
            return
        self._task = asyncio.create_task(self._run(), name=f"timing-{self.session.id}")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while self.session.timing_active:
            await asyncio.sleep(self.interval)
            self.session.tick()
        logger.debug("Timing bar for battle %s stopped in phase %s", self.session.id, self.session.phase.value)
