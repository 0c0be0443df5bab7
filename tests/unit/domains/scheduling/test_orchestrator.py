import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from clinicbot.domains.scheduling.application.dto import DispatchSummary, HandoffSweepSummary, NoShowSummary, RetrySummary
from clinicbot.domains.scheduling.infrastructure.scheduler import PASS_ORDER, NotificationOrchestrator


def _pass(result):
    use_case = MagicMock()
    use_case.execute = AsyncMock(return_value=result)
    return use_case


@pytest.fixture
def passes():
    registry = MagicMock()
    registry.sweep_stale = AsyncMock(return_value=HandoffSweepSummary(closed=1, active=2))
    return {
        "dispatch_reminders": _pass(DispatchSummary(sent=3)),
        "detect_no_shows": _pass(NoShowSummary(marked=1)),
        "retry_failed": _pass(RetrySummary(retried=2, succeeded=2)),
        "handoff_registry": registry,
    }


@pytest.fixture
def orchestrator(passes):
    return NotificationOrchestrator(**passes, interval_minutes=5, initial_delay_seconds=10)


class TestRunTick:
    @pytest.mark.asyncio
    async def test_runs_all_passes_in_order(self, orchestrator, passes):
        calls = []

        def record(name, result):
            async def run():
                calls.append(name)
                return result

            return run

        passes["dispatch_reminders"].execute.side_effect = record("reminders", DispatchSummary())
        passes["detect_no_shows"].execute.side_effect = record("no_shows", NoShowSummary())
        passes["retry_failed"].execute.side_effect = record("retries", RetrySummary())
        passes["handoff_registry"].sweep_stale.side_effect = record("handoffs", HandoffSweepSummary())

        report = await orchestrator.run_tick()

        assert calls == list(PASS_ORDER)
        assert report.ok
        assert set(report.results) == set(PASS_ORDER)

    @pytest.mark.asyncio
    async def test_failing_pass_does_not_stop_the_others(self, orchestrator, passes):
        passes["detect_no_shows"].execute.side_effect = RuntimeError("store unavailable")

        with patch("clinicbot.domains.scheduling.infrastructure.scheduler.orchestrator.capture_exception") as capture:
            report = await orchestrator.run_tick()

        assert report.errors == {"no_shows": "store unavailable"}
        assert report.results["retries"].succeeded == 2
        assert report.results["handoffs"].closed == 1
        capture.assert_called_once()

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_next_tick(self, orchestrator, passes):
        passes["retry_failed"].execute.side_effect = [RuntimeError("boom"), RetrySummary()]

        with patch("clinicbot.domains.scheduling.infrastructure.scheduler.orchestrator.capture_exception"):
            first = await orchestrator.run_tick()
            second = await orchestrator.run_tick()

        assert not first.ok
        assert second.ok
        assert orchestrator.last_report is second

    @pytest.mark.asyncio
    async def test_ticks_are_serialized(self, orchestrator, passes):
        running = 0
        max_running = 0

        async def slow_pass():
            nonlocal running, max_running
            running += 1
            max_running = max(max_running, running)
            await asyncio.sleep(0.01)
            running -= 1
            return DispatchSummary()

        passes["dispatch_reminders"].execute.side_effect = slow_pass

        await asyncio.gather(orchestrator.run_tick(), orchestrator.trigger_manual_tick())

        assert max_running == 1


class TestConfiguration:
    def test_interval_must_divide_an_hour(self, passes):
        with pytest.raises(ValueError):
            NotificationOrchestrator(**passes, interval_minutes=7)

    @pytest.mark.asyncio
    async def test_disabled_orchestrator_does_not_schedule(self, passes):
        orchestrator = NotificationOrchestrator(**passes, enabled=False)

        await orchestrator.start()

        assert orchestrator.is_running is False
        assert orchestrator.get_jobs_info() == []

    @pytest.mark.asyncio
    async def test_start_registers_cron_and_initial_jobs(self, orchestrator):
        await orchestrator.start()
        try:
            jobs = {job["id"]: job for job in orchestrator.get_jobs_info()}
            assert orchestrator.is_running
            assert set(jobs) == {"notification_tick", "notification_initial_tick"}
            assert jobs["notification_tick"]["next_run"] is not None
        finally:
            await orchestrator.stop()

        assert orchestrator.is_running is False
