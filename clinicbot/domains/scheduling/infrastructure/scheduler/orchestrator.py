# ============================================================================
# SCOPE: INFRASTRUCTURE (Scheduling)
# Description: APScheduler-driven orchestrator running the notification passes.
# ============================================================================
"""Notification Orchestrator.

Every N minutes (cron `minute="*/N"`) and once shortly after start-up, runs:

1. reminders  - lead-time reminder dispatch
2. no_shows   - no-show detection and notices
3. retries    - failed message retry sweep
4. handoffs   - stale handoff sweep and membership reload

Passes run sequentially and are fault-isolated: an error escaping one pass is
logged, reported to Sentry and recorded in the TickReport, and the next pass
still runs. Ticks are serialized with a lock, so an overrunning tick delays
the next one instead of overlapping it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-not-found]
from apscheduler.triggers.cron import CronTrigger  # type: ignore[import-not-found]
from apscheduler.triggers.date import DateTrigger  # type: ignore[import-not-found]
from pytz import utc

from clinicbot.domains.scheduling.application.dto import TickReport
from clinicbot.integrations.monitoring import capture_exception

if TYPE_CHECKING:
    from clinicbot.domains.scheduling.application.use_cases import (
        DetectNoShowsUseCase,
        DispatchRemindersUseCase,
        RetryFailedMessagesUseCase,
    )
    from clinicbot.domains.scheduling.infrastructure.handoff import HandoffRegistry

logger = logging.getLogger(__name__)

PASS_ORDER = ("reminders", "no_shows", "retries", "handoffs")

TICK_JOB_ID = "notification_tick"
INITIAL_JOB_ID = "notification_initial_tick"


class NotificationOrchestrator:
    """Scheduler for the notification passes.

    Attributes:
        _scheduler: APScheduler instance, created on start().
        _tick_lock: Serializes ticks (scheduled, initial and manual).
        _last_report: TickReport of the most recent tick.
    """

    def __init__(
        self,
        dispatch_reminders: DispatchRemindersUseCase,
        detect_no_shows: DetectNoShowsUseCase,
        retry_failed: RetryFailedMessagesUseCase,
        handoff_registry: HandoffRegistry,
        interval_minutes: int = 5,
        initial_delay_seconds: int = 10,
        enabled: bool = True,
    ):
        """Initialize orchestrator.

        Args:
            dispatch_reminders: Reminder pass.
            detect_no_shows: No-show pass.
            retry_failed: Retry sweep.
            handoff_registry: Registry whose stale sweep is the last pass.
            interval_minutes: Tick interval; must divide 60.
            initial_delay_seconds: Delay of the one-shot start-up tick.
            enabled: Whether start() schedules anything.
        """
        if interval_minutes < 1 or 60 % interval_minutes != 0:
            raise ValueError("interval_minutes must be a divisor of 60")

        self._passes: dict[str, Callable[[], Awaitable[Any]]] = {
            "reminders": dispatch_reminders.execute,
            "no_shows": detect_no_shows.execute,
            "retries": retry_failed.execute,
            "handoffs": handoff_registry.sweep_stale,
        }
        self.interval_minutes = interval_minutes
        self.initial_delay_seconds = initial_delay_seconds
        self.enabled = enabled

        self._scheduler: AsyncIOScheduler | None = None
        self._is_running = False
        self._tick_lock = asyncio.Lock()
        self._last_report: TickReport | None = None

    async def start(self) -> None:
        """Start the scheduler."""
        if not self.enabled:
            logger.info("NotificationOrchestrator is disabled, skipping start")
            return

        if self._is_running:
            logger.warning("NotificationOrchestrator already running")
            return

        scheduler = AsyncIOScheduler(timezone=utc)
        self._scheduler = scheduler

        scheduler.add_job(
            self.run_tick,
            CronTrigger(minute=f"*/{self.interval_minutes}", timezone=utc),
            id=TICK_JOB_ID,
            name="Notification Passes",
            replace_existing=True,
            max_instances=2,
            coalesce=True,
        )

        scheduler.add_job(
            self.run_tick,
            DateTrigger(run_date=datetime.now(UTC) + timedelta(seconds=self.initial_delay_seconds)),
            id=INITIAL_JOB_ID,
            name="Initial Notification Passes",
            replace_existing=True,
        )

        scheduler.start()
        self._is_running = True
        logger.info(
            f"NotificationOrchestrator started (every {self.interval_minutes} min, "
            f"initial run in {self.initial_delay_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the scheduler without waiting for pending jobs."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("NotificationOrchestrator stopped")

    async def run_tick(self) -> TickReport:
        """Run all passes once, in order."""
        async with self._tick_lock:
            report = TickReport()
            started = datetime.now(UTC)
            logger.info("Running notification passes")

            for name in PASS_ORDER:
                try:
                    report.results[name] = await self._passes[name]()
                except Exception as e:
                    logger.error(f"Error in {name} pass: {e}", exc_info=True)
                    capture_exception(e, {"pass": name})
                    report.errors[name] = str(e)

            elapsed = (datetime.now(UTC) - started).total_seconds()
            logger.info(f"Notification passes finished in {elapsed:.1f}s ({len(report.errors)} failed)")
            self._last_report = report
            return report

    async def trigger_manual_tick(self) -> TickReport:
        """Run a tick now, outside the schedule (waits for a running tick)."""
        logger.info("Manual notification tick requested")
        return await self.run_tick()

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._is_running

    @property
    def last_report(self) -> TickReport | None:
        return self._last_report

    def get_jobs_info(self) -> list[dict[str, Any]]:
        """Get information about scheduled jobs."""
        if not self._scheduler:
            return []

        jobs = []
        for job in self._scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                }
            )
        return jobs
