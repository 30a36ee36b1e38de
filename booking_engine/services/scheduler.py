"""Background scheduler that finalizes elapsed reservations."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from booking_engine.core.config import settings
from booking_engine.core.database import AsyncSessionLocal
from booking_engine.services.lifecycle import reservation_lifecycle

logger = logging.getLogger(__name__)


class ReservationFinalizer:
    """Periodically moves reservations whose window has ended to finalizada."""

    def __init__(self, session_factory=AsyncSessionLocal, lifecycle=reservation_lifecycle):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler()
        self.session_factory = session_factory
        self.lifecycle = lifecycle
        self.running = False

    async def start(self, interval_minutes: int = None):
        """Start the scheduler."""
        if self.running:
            logger.warning("Finalizer is already running")
            return

        interval_minutes = interval_minutes or settings.FINALIZER_INTERVAL_MINUTES
        logger.info(f"Starting reservation finalizer every {interval_minutes} minutes")

        self.scheduler.add_job(
            self.run_once,
            IntervalTrigger(minutes=interval_minutes),
            id="finalizer_job",
            name="Finalize elapsed reservations",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info("Reservation finalizer started")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping reservation finalizer")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Reservation finalizer stopped")

    async def run_once(self) -> int:
        """
        Finalize every elapsed reservation in one pass.

        Returns:
            Number of reservations finalized
        """
        logger.debug("Running finalizer pass")

        async with self.session_factory() as db:
            try:
                return await self.lifecycle.finalize_elapsed(db)
            except Exception as e:
                logger.error(f"Error finalizing reservations: {e}", exc_info=True)
                await db.rollback()
                raise


# Singleton instance
reservation_finalizer = ReservationFinalizer()
