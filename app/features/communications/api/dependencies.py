"""Route dependencies shared by the communication routers."""

from app.db.neo4j import check_connection
from app.features.communications.domain.errors import UpstreamUnavailable


async def require_connection() -> None:
    """Fail listing endpoints with 503 before any work when the store is down."""
    if not await check_connection():
        raise UpstreamUnavailable()
