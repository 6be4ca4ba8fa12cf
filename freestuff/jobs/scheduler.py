# freestuff/jobs/scheduler.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from freestuff.config import settings
from freestuff.errors import RunInProgressError
from freestuff.schemas import RunLogEntry
from freestuff.services.orchestrator import ScraperOrchestrator
from freestuff.services.runlog import RunLog

logger = logging.getLogger(__name__)

JOB_ID = "scrape-all"

class IngestScheduler:
    def __init__(self, orchestrator: ScraperOrchestrator, run_log: Optional[RunLog] = None):
        self.orchestrator = orchestrator
        self.run_log = run_log or RunLog()
        self._sched: Optional[AsyncIOScheduler] = None
        self._active: set[asyncio.Task] = set()

    async def run_once(self) -> Optional[RunLogEntry]:
        """Run every scraper once and record the outcome.

        Returns None when another run already holds the orchestrator; that
        attempt is dropped and not written to the run log. Run failures and
        run log write errors are logged, never raised.
        """
        task = asyncio.current_task()
        if task is not None:
            self._active.add(task)
        try:
            return await self._run()
        finally:
            self._active.discard(task)

    async def _run(self) -> Optional[RunLogEntry]:
        timestamp = datetime.now(timezone.utc).isoformat()
        logger.info("=== starting scraper run at %s ===", timestamp)
        try:
            results = await self.orchestrator.run_all()
        except RunInProgressError:
            logger.warning("scraper run already in progress, skipping")
            return None
        except Exception as e:
            logger.exception("scraper run failed")
            entry = RunLogEntry(timestamp=timestamp, error=str(e) or e.__class__.__name__, success=False)
        else:
            logger.info("scraper run completed: %s", ", ".join(f"{r.source}={r.count}" for r in results))
            entry = RunLogEntry(timestamp=timestamp, results=results, success=True)
        try:
            self.run_log.append(entry)
        except OSError:
            logger.exception("could not write run log entry to %s", self.run_log.path)
        return entry

    def start(self) -> AsyncIOScheduler:
        sched = AsyncIOScheduler(timezone=settings.SCHEDULER_TIMEZONE)
        # first run fires right away, then daily at SCRAPE_HOUR:SCRAPE_MINUTE
        sched.add_job(
            self.run_once,
            CronTrigger(hour=settings.SCRAPE_HOUR, minute=settings.SCRAPE_MINUTE, timezone=settings.SCHEDULER_TIMEZONE),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        sched.start()
        self._sched = sched
        return sched

    def shutdown(self):
        """Stop future triggers and cancel any run still in flight."""
        if self._sched is not None and self._sched.running:
            self._sched.shutdown(wait=False)
        self._sched = None
        for task in list(self._active):
            if not task.done():
                logger.info("cancelling in-flight scraper run")
                task.cancel()
