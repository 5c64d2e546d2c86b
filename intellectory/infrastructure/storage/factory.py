"""
Table client factory.

Chooses the backend from storage settings and wraps it with retries.
"""

from intellectory.config import get_logger, get_settings
from intellectory.core.interfaces.table_client import ITableClient
from intellectory.infrastructure.storage.retry import RetryingTableClient
from intellectory.infrastructure.storage.unavailable import UnavailableTableClient

logger = get_logger(__name__)

_client: ITableClient | None = None


def create_table_client(backend: str | None = None) -> ITableClient:
    """
    Build a table client for `backend` ("sqlite" or "rest", default from settings).

    A REST backend without URL or key yields an UnavailableTableClient so
    the app still starts and every data call fails with a 503.
    """
    settings = get_settings()
    backend = backend or settings.storage.backend

    if backend == "sqlite":
        from intellectory.infrastructure.storage.sqlite.table_client import SQLiteTableClient

        inner: ITableClient = SQLiteTableClient()

    elif backend == "rest":
        if not settings.storage.rest_configured:
            reason = "STORAGE_REST_URL and STORAGE_REST_KEY must both be set"
            logger.error("storage_unavailable", backend=backend, reason=reason)
            return UnavailableTableClient(reason)

        from intellectory.infrastructure.storage.rest.client import RestTableClient

        inner = RestTableClient(
            base_url=settings.storage.rest_url or "",
            api_key=settings.storage.rest_key or "",
            timeout=settings.storage.rest_timeout,
        )

    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info("table_client_created", backend=backend)
    return RetryingTableClient(
        inner,
        attempts=settings.storage.retry_attempts,
        base_delay=settings.storage.retry_base_delay,
    )


def get_table_client() -> ITableClient:
    """Get or create the process-wide table client."""
    global _client
    if _client is None:
        _client = create_table_client()
    return _client


async def close_table_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
