"""
Tests for the DomainEventBus.
"""

import asyncio
import logging

import pytest

from workspace_diagnostics.core.events.domain_event import DomainEvent
from workspace_diagnostics.core.events.event_bus import DomainEventBus
from workspace_diagnostics.core.events.ingestion_events import (
    DiagnosticsWarningEvent,
    IngestionStartedEvent,
)


def started_event():
    return IngestionStartedEvent(client_id=1, client_name="ts_ls", total_files=3)


@pytest.mark.asyncio
async def test_subscribers_receive_only_their_event_type():
    bus = DomainEventBus()
    started, warnings = [], []

    async def on_started(event):
        started.append(event)

    async def on_warning(event):
        warnings.append(event)

    await bus.subscribe(IngestionStartedEvent, on_started)
    await bus.subscribe(DiagnosticsWarningEvent, on_warning)

    warning = DiagnosticsWarningEvent(message="careful")
    await bus.publish(warning)

    assert warnings == [warning]
    assert started == []


@pytest.mark.asyncio
async def test_subclass_events_do_not_reach_base_subscribers():
    bus = DomainEventBus()
    seen = []

    async def on_any(event):
        seen.append(event)

    await bus.subscribe(DomainEvent, on_any)
    await bus.publish(started_event())

    assert seen == []


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_a_no_op():
    await DomainEventBus().publish(started_event())


@pytest.mark.asyncio
async def test_publish_returns_after_slow_subscribers_finish():
    bus = DomainEventBus()
    finished = []

    async def slow(event):
        await asyncio.sleep(0.01)
        finished.append(event.name)

    await bus.subscribe(IngestionStartedEvent, slow)
    await bus.publish(started_event())

    assert finished == ["IngestionStartedEvent"]


@pytest.mark.asyncio
async def test_failing_subscriber_is_logged_and_others_still_run(caplog):
    bus = DomainEventBus()
    delivered = []

    async def broken_presenter(event):
        raise ValueError("cannot render")

    async def working_presenter(event):
        await asyncio.sleep(0)
        delivered.append(event)

    await bus.subscribe(IngestionStartedEvent, broken_presenter)
    await bus.subscribe(IngestionStartedEvent, working_presenter)

    event = started_event()
    with caplog.at_level(logging.ERROR):
        await bus.publish(event)

    assert delivered == [event]
    [record] = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert "broken_presenter" in record.getMessage()
    assert "cannot render" in record.getMessage()
    assert event.short_id in record.getMessage()


@pytest.mark.asyncio
async def test_cancelling_the_publisher_cancels_subscribers():
    bus = DomainEventBus()
    entered = asyncio.Event()
    cancelled = []

    async def blocking(event):
        entered.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(event)
            raise

    await bus.subscribe(IngestionStartedEvent, blocking)
    task = asyncio.create_task(bus.publish(started_event()))
    await entered.wait()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(cancelled) == 1


@pytest.mark.asyncio
async def test_unsubscribe_all():
    bus = DomainEventBus()

    async def handler(event):
        pass

    await bus.subscribe(IngestionStartedEvent, handler)
    assert bus.handler_count(IngestionStartedEvent) == 1

    await bus.unsubscribe_all()

    assert bus.handler_count(IngestionStartedEvent) == 0
