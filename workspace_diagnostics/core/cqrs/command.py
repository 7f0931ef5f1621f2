from typing import TypeVar

from workspace_diagnostics.core.cqrs.bus import MessageHandler


class Command:
    """A request that may start runs or reset session state."""


TCommand = TypeVar("TCommand", bound=Command)
TResult = TypeVar("TResult")


class CommandHandler(MessageHandler[TCommand, TResult]):
    pass
