from workspace_diagnostics.core.cqrs.query import QueryHandler
from workspace_diagnostics.domains.diagnostics.queries import GetStatusQuery
from workspace_diagnostics.models import StatusSnapshot
from workspace_diagnostics.services.session.diagnostics_session import DiagnosticsSession


class GetStatusQueryHandler(QueryHandler[GetStatusQuery, StatusSnapshot]):
    """Read-only: never touches the cache or client state."""

    def __init__(self, session: DiagnosticsSession):
        self._session = session

    async def handle(self, query: GetStatusQuery) -> StatusSnapshot:
        return self._session.status()
