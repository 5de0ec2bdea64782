import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from transport_api.core.config import Settings
from transport_api.services.cache import CacheService

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "cache_cleanup"


class CacheCleanupScheduler:
    """Runs periodic cache compaction in the background."""

    def __init__(self, settings: Settings, cache: CacheService):
        self.settings = settings
        self.cache = cache
        self.scheduler = AsyncIOScheduler()
        self._setup_jobs()

    def _setup_jobs(self):
        self.scheduler.add_job(
            func=self.run_cleanup,
            trigger=IntervalTrigger(
                minutes=self.settings.cache_cleanup_interval_minutes
            ),
            id=CLEANUP_JOB_ID,
            name="Compact in-memory cache",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    def start(self):
        logger.info(
            "Starting cache cleanup scheduler (every %s minutes)",
            self.settings.cache_cleanup_interval_minutes,
        )
        self.scheduler.start()

    def stop(self):
        """Stop the scheduler without waiting for a running pass."""
        if self.scheduler.running:
            logger.info("Stopping cache cleanup scheduler")
            self.scheduler.shutdown(wait=False)

    async def run_cleanup(self) -> int:
        """One compaction pass; failures are logged so the job keeps running."""
        try:
            removed = await self.cache.compact()
        except Exception:
            logger.exception("Cache cleanup failed")
            return 0

        diagnostics = self.cache.get_diagnostics()
        logger.info(
            "Cache cleanup completed: %s entries removed, %s remaining, hit ratio %.2f%%",
            removed,
            diagnostics.total_entries,
            diagnostics.hit_ratio * 100,
        )
        return removed

    def get_job_info(self) -> dict:
        """Get information about scheduled jobs."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": next_run.isoformat() if next_run else None,
                    "trigger": str(job.trigger),
                }
            )

        return {
            "scheduler_running": self.scheduler.running,
            "jobs": jobs,
        }
