from workspace_diagnostics.core.cqrs.bus import MessageBus


class CommandBus(MessageBus):
    """Returns whatever the handler returns, usually the tasks a trigger started."""

    kind = "command"
