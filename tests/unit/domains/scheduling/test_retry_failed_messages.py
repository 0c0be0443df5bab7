from datetime import UTC, datetime, timedelta

import pytest

from clinicbot.domains.scheduling.application.use_cases import RetryFailedMessagesUseCase
from clinicbot.domains.scheduling.domain.entities import MessageLogEntry
from clinicbot.domains.scheduling.domain.value_objects import MessageStatus

from scheduling_fakes import FakeResolver

NOW = datetime(2024, 3, 9, 14, 0, tzinfo=UTC)


def _failed(appointment_id="appt-1", retry_count=0, minutes_ago=10, status=MessageStatus.FAILED):
    return MessageLogEntry(
        appointment_id=appointment_id,
        patient_id="pat-1",
        template_name="reminder_24h",
        phone="+55 11 99999-0000",
        message="Olá Maria",
        status=status,
        retry_count=retry_count,
        error="Gateway send failed" if status is MessageStatus.FAILED else None,
        created_at=NOW - timedelta(minutes=minutes_ago),
    )


def _use_case(message_logs, gateway, resolver=None, batch_size=10):
    return RetryFailedMessagesUseCase(
        message_logs=message_logs,
        connection_resolver=resolver or FakeResolver(),
        gateway=gateway,
        max_attempts=3,
        batch_size=batch_size,
        clock=lambda: NOW,
    )


class TestRetryFailedMessages:
    @pytest.mark.asyncio
    async def test_successful_retry_marks_sent(self, message_logs, gateway):
        row = await message_logs.add(_failed())

        summary = await _use_case(message_logs, gateway).execute()

        assert summary.succeeded == 1
        assert row.status is MessageStatus.SENT
        assert row.retry_count == 1
        assert row.sent_at == NOW
        assert row.last_retry_at == NOW
        assert row.error is None
        assert gateway.sent == [("clinic", "5511999990000", "Olá Maria")]

    @pytest.mark.asyncio
    async def test_failed_retry_records_attempt_number(self, message_logs, gateway):
        row = await message_logs.add(_failed(retry_count=1))
        gateway.results = [False]

        summary = await _use_case(message_logs, gateway).execute()

        assert summary.still_failing == 1
        assert row.status is MessageStatus.FAILED
        assert row.retry_count == 2
        assert row.error == "Retry 2/3 failed"

    @pytest.mark.asyncio
    async def test_retry_count_never_exceeds_max(self, message_logs, gateway):
        row = await message_logs.add(_failed())
        gateway.results = [False] * 10
        use_case = _use_case(message_logs, gateway)

        for _ in range(5):
            await use_case.execute()

        assert row.retry_count == 3
        assert len(gateway.sent) == 3
        assert row.status is MessageStatus.FAILED

    @pytest.mark.asyncio
    async def test_no_gateway_skips_whole_sweep(self, message_logs, gateway):
        row = await message_logs.add(_failed())

        summary = await _use_case(message_logs, gateway, resolver=FakeResolver(instance=None)).execute()

        assert summary.skipped_no_gateway is True
        assert row.retry_count == 0
        assert gateway.sent == []

    @pytest.mark.asyncio
    async def test_batch_is_oldest_first_and_bounded(self, message_logs, gateway):
        newest = await message_logs.add(_failed(appointment_id="new", minutes_ago=1))
        oldest = await message_logs.add(_failed(appointment_id="old", minutes_ago=30))

        summary = await _use_case(message_logs, gateway, batch_size=1).execute()

        assert summary.selected == 1
        assert oldest.status is MessageStatus.SENT
        assert newest.status is MessageStatus.FAILED

    @pytest.mark.asyncio
    async def test_row_superseded_by_successful_delivery_is_closed(self, message_logs, gateway):
        failed = await message_logs.add(_failed())
        await message_logs.add(_failed(status=MessageStatus.DELIVERED))

        summary = await _use_case(message_logs, gateway).execute()

        assert summary.superseded == 1
        assert gateway.sent == []
        assert failed.retry_count == 3
        assert failed.error == "Superseded by successful delivery"
        assert len(message_logs.successful_rows()) == 1

    @pytest.mark.asyncio
    async def test_empty_batch_does_not_probe_gateway(self, message_logs, gateway):
        resolver = FakeResolver()

        summary = await _use_case(message_logs, gateway, resolver=resolver).execute()

        assert summary.selected == 0
        assert resolver.calls == 0
