from dataclasses import dataclass

from workspace_diagnostics.core.cqrs.query import Query


@dataclass
class GetStatusQuery(Query):
    """Cached file count, cache age, processing clients and triggered count."""
    pass
