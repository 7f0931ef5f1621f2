"""
Single-handler routing shared by the command and query buses.

Each message type maps to exactly one async callable. The facade in
`workspace_diagnostics.api` never talks to the session directly; it builds a
message and hands it to the matching bus.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, ClassVar, Dict, Generic, Type, TypeVar

logger = logging.getLogger(__name__)

TMessage = TypeVar("TMessage")
TResult = TypeVar("TResult")

Route = Callable[[Any], Awaitable[Any]]


class MessageHandler(ABC, Generic[TMessage, TResult]):
    """Registered through its bound `handle` method."""

    @abstractmethod
    async def handle(self, message: TMessage) -> TResult:
        raise NotImplementedError


class MessageBus:
    kind: ClassVar[str] = "message"

    def __init__(self) -> None:
        self._routes: Dict[type, Route] = {}

    def register(self, message_type: Type[Any], handler: Route) -> None:
        name = message_type.__name__
        if message_type in self._routes:
            raise ValueError(f"Handler for {self.kind} '{name}' is already registered")

        self._routes[message_type] = handler
        logger.debug(f"Routing {self.kind} {name} to {getattr(handler, '__qualname__', handler)}")

    def is_registered(self, message_type: Type[Any]) -> bool:
        return message_type in self._routes

    def clear(self) -> None:
        self._routes.clear()

    def route_for(self, message: Any) -> Route:
        try:
            return self._routes[type(message)]
        except KeyError:
            raise ValueError(
                f"No handler registered for {self.kind} '{type(message).__name__}'"
            ) from None

    async def execute(self, message: Any) -> Any:
        return await self.route_for(message)(message)
