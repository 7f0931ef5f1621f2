"""
In-process pub/sub for ingestion progress and user warnings.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Type

from workspace_diagnostics.core.events.domain_event import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class DomainEventBus:
    """
    Subscribers are matched on the exact event class. `publish` runs every
    subscriber concurrently and returns once all of them have settled, so a
    pipeline that publishes started/chunk/completed in sequence is observed
    in that order. A subscriber that raises is logged and does not affect
    the publisher or the other subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        async with self._lock:
            self._subscribers[event_type].append(handler)
        logging.debug(f"{handler.__name__} subscribed to {event_type.__name__}")

    async def unsubscribe_all(self) -> None:
        async with self._lock:
            self._subscribers.clear()

    def handler_count(self, event_type: Type[DomainEvent]) -> int:
        return len(self._subscribers.get(event_type, ()))

    async def publish(self, event: DomainEvent) -> None:
        subscribers = tuple(self._subscribers.get(type(event), ()))
        if not subscribers:
            return

        outcomes = await asyncio.gather(
            *(handler(event) for handler in subscribers), return_exceptions=True
        )
        for handler, outcome in zip(subscribers, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logging.error(
                    f"Subscriber '{handler.__name__}' failed on {event.name} "
                    f"[{event.short_id}]: {outcome}",
                    exc_info=outcome,
                )
