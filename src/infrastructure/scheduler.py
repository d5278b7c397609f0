"""
Background scheduler for merchant maintenance jobs.

Runs inside the FastAPI process. Uses APScheduler to:
    1. Reset every merchant's API quota at midnight UTC
    2. Purge expired email verification tokens every hour

Each run opens its own database session, committed when the job succeeds.
"""

from typing import Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services import MerchantService
from src.core.metrics import record_maintenance_run
from src.infrastructure.database import DatabaseSessionManager, db_manager

logger = structlog.get_logger(__name__)

QUOTA_RESET_JOB_ID = "reset_api_quotas"
TOKEN_CLEANUP_JOB_ID = "cleanup_expired_tokens"


class MaintenanceScheduler:
    """Schedules the periodic merchant lifecycle jobs."""

    def __init__(
        self,
        service_factory: Callable[[AsyncSession], MerchantService],
        session_manager: Optional[DatabaseSessionManager] = None,
    ):
        self._service_factory = service_factory
        self._session_manager = session_manager or db_manager
        self._scheduler: Optional[AsyncIOScheduler] = None

    def start(self) -> None:
        """Register the jobs and start the scheduler on the running event loop."""
        self._scheduler = AsyncIOScheduler(timezone="UTC")

        self._scheduler.add_job(
            self.reset_api_quotas,
            CronTrigger(hour=0, minute=0, timezone="UTC"),
            id=QUOTA_RESET_JOB_ID,
            name="Daily API quota reset",
            replace_existing=True,
        )

        self._scheduler.add_job(
            self.cleanup_expired_tokens,
            IntervalTrigger(hours=1),
            id=TOKEN_CLEANUP_JOB_ID,
            name="Expired verification token cleanup",
            replace_existing=True,
        )

        self._scheduler.start()
        logger.info("maintenance_scheduler_started", jobs=self.job_ids)

    def stop(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("maintenance_scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def job_ids(self) -> list:
        if self._scheduler is None:
            return []
        return [job.id for job in self._scheduler.get_jobs()]

    async def reset_api_quotas(self) -> int:
        """Job: start a new API quota window for every merchant."""
        try:
            async with self._session_manager.session() as session:
                count = await self._service_factory(session).reset_api_quotas()
        except Exception as e:
            record_maintenance_run(QUOTA_RESET_JOB_ID, success=False)
            logger.error("maintenance_job_failed", job=QUOTA_RESET_JOB_ID, error=str(e))
            return 0

        record_maintenance_run(QUOTA_RESET_JOB_ID, success=True)
        return count

    async def cleanup_expired_tokens(self) -> int:
        """Job: clear verification tokens that expired unused."""
        try:
            async with self._session_manager.session() as session:
                count = await self._service_factory(session).cleanup_expired_tokens()
        except Exception as e:
            record_maintenance_run(TOKEN_CLEANUP_JOB_ID, success=False)
            logger.error("maintenance_job_failed", job=TOKEN_CLEANUP_JOB_ID, error=str(e))
            return 0

        record_maintenance_run(TOKEN_CLEANUP_JOB_ID, success=True)
        return count
