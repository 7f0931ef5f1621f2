import time
import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Base for everything published on the DomainEventBus.

    Base fields are keyword-only so subclasses can declare required fields.
    `published_at` is monotonic, comparable with the catalog's cache clock.
    """

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    published_at: float = field(default_factory=time.monotonic)

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def short_id(self) -> str:
        return self.event_id[:8]
