"""Weekly scheduler for the check-and-send run."""

import logging
from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from menu_notifier.core import DeliveryOutcome, DeliveryStatus
from menu_notifier.use_cases import DeliveryOrchestrator

logger = logging.getLogger(__name__)

JOB_ID = "weekly_check_and_send"


class WeeklyScheduler:
    """Run ``check_and_send`` on a cron schedule (default Monday 09:00 KST)."""

    def __init__(
        self,
        orchestrator: DeliveryOrchestrator,
        destination: str,
        cron: str = "0 9 * * 1",
        timezone: str = "Asia/Seoul",
        max_attempts: int = 6,
        delay: timedelta = timedelta(hours=1),
        scheduler: Optional[AsyncIOScheduler] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.destination = destination
        self.cron = cron
        self.timezone = timezone
        self.max_attempts = max_attempts
        self.delay = delay
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone)

    def start(self) -> None:
        """Register the weekly job and start the scheduler."""
        self.scheduler.add_job(
            self.run_job,
            trigger=CronTrigger.from_crontab(self.cron, timezone=self.timezone),
            id=JOB_ID,
            name="Weekly menu check-and-send",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info("Scheduler started (%s, %s)", self.cron, self.timezone)

    def shutdown(self) -> None:
        """Stop future runs. A run that is waiting between attempts is not cancelled."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    async def run_job(self) -> Optional[DeliveryOutcome]:
        """Scheduled entry point. Never raises."""
        logger.info("Weekly menu delivery started for %s", self.destination)
        try:
            outcome = await self.orchestrator.check_and_send(
                self.destination, max_attempts=self.max_attempts, delay=self.delay
            )
        except Exception:
            logger.exception("Weekly menu delivery crashed")
            return None

        log_outcome(outcome)
        return outcome

    async def run_now(self) -> DeliveryOutcome:
        """Manual trigger: a single attempt with no waiting."""
        logger.info("Manual run for %s", self.destination)
        outcome = await self.orchestrator.check_and_send(
            self.destination, max_attempts=1, delay=timedelta(0)
        )
        log_outcome(outcome)
        return outcome


def log_outcome(outcome: DeliveryOutcome) -> None:
    if outcome.status == DeliveryStatus.DELIVERED:
        delivered_at = outcome.delivered_at.isoformat() if outcome.delivered_at else "-"
        logger.info("Delivered on attempt %d at %s", outcome.attempt_count, delivered_at)
    elif outcome.status == DeliveryStatus.SKIPPED_DUPLICATE:
        logger.info("Skipped: %s", outcome.reason)
    elif outcome.status == DeliveryStatus.FAILED:
        logger.error("Delivery failed after %d attempts: %s", outcome.attempt_count, outcome.reason)
    else:
        logger.warning("Gave up after %d attempts: %s", outcome.attempt_count, outcome.reason)
