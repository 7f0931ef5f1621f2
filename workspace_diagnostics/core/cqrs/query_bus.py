import logging
from typing import Any

from workspace_diagnostics.core.cqrs.bus import MessageBus
from workspace_diagnostics.core.cqrs.query import Query

logger = logging.getLogger(__name__)


class QueryBus(MessageBus):
    kind = "query"

    async def execute(self, query: Query) -> Any:
        handler = self.route_for(query)
        try:
            return await handler(query)
        except Exception as e:
            logger.error(f"Query {type(query).__name__} failed: {e}", exc_info=True)
            raise
