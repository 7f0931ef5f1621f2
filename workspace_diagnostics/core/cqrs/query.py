from typing import TypeVar

from workspace_diagnostics.core.cqrs.bus import MessageHandler


class Query:
    """A read-only request. Handlers must not touch the cache or client state."""


TQuery = TypeVar("TQuery", bound=Query)
TResult = TypeVar("TResult")


class QueryHandler(MessageHandler[TQuery, TResult]):
    pass
