"""
services/scheduler.py
---------------------
In-process repeating trigger for the due-invoice sweep.

Used when no external cron calls the HTTP trigger. The process root owns
the scheduler (start on startup, stop on shutdown); there is no global timer.
"""

import asyncio
from datetime import datetime
from typing import Optional

from config import SCHEDULER_INTERVAL_SECONDS
from models.processing import SweepSummary
from services.invoice_processor import DueInvoiceProcessor
from services.schedule_calc import now_in_reference_tz
from utils.logger import get_logger

logger = get_logger(__name__)


class InvoiceScheduler:
    """
    Runs one sweep immediately on start, then one every ``interval_seconds``.

    Usage:
        async with InvoiceScheduler(processor):
            ...  # sweeps run in the background
    """

    def __init__(
        self,
        processor: DueInvoiceProcessor,
        interval_seconds: float = SCHEDULER_INTERVAL_SECONDS,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.processor = processor
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self.runs = 0
        self.last_run_at: Optional[datetime] = None
        self.last_summary: Optional[SweepSummary] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            logger.warning("⚠️ Scheduler is already running")
            return
        logger.info(f"🚀 Starting invoice scheduler (every {self.interval_seconds:g}s)")
        self._task = asyncio.create_task(self._loop(), name="invoice-scheduler")

    async def stop(self) -> None:
        if not self.is_running:
            return
        logger.info("🛑 Stopping invoice scheduler...")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("✅ Invoice scheduler stopped")

    async def run_once(self) -> Optional[SweepSummary]:
        """One sweep; errors are logged so the loop keeps going."""
        self.last_run_at = now_in_reference_tz()
        self.runs += 1
        try:
            self.last_summary = await self.processor.process_due_invoices(self.last_run_at)
            return self.last_summary
        except Exception as e:
            logger.exception(f"❌ Scheduled sweep failed: {e}")
            return None

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def status(self) -> dict:
        return {
            "is_running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "runs": self.runs,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
        }

    async def __aenter__(self) -> "InvoiceScheduler":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
