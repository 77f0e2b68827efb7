import asyncio
import logging
from typing import Callable, Optional

from .database import SessionLocal
from .services.booking_service import BookingService

logger = logging.getLogger(__name__)


def expire_pending_requests() -> int:
    """One sweep in its own session; returns how many requests were declined"""
    db = SessionLocal()
    try:
        return len(BookingService(db).expire_stale_bookings())
    finally:
        db.close()


class ExpirySweeper:
    """Runs `sweep` every `interval` seconds until stopped.

    The sweep itself is blocking (database work), so each run goes to a
    worker thread and the event loop stays free.
    """

    def __init__(self, sweep: Callable[[], int] = expire_pending_requests, interval: float = 30):
        self.sweep = sweep
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Expiry sweep started, every {self.interval}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweep stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                count = await asyncio.to_thread(self.sweep)
                if count:
                    logger.info(f"Expiry sweep declined {count} request(s)")
            except Exception as e:
                # Keep the timer alive; the next tick retries
                logger.exception(f"Expiry sweep failed: {e}")
