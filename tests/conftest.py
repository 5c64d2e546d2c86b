"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from intellectory.application.services import reset_services
from intellectory.core.entities.team import SessionContext, TeamRole


@pytest.fixture
def ctx() -> SessionContext:
    """Session of an owner acting for team-1."""
    return SessionContext(
        user_id="user-1",
        team_id="team-1",
        team_name="Groenkloof Packhouse",
        role=TeamRole.OWNER,
    )


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def sqlite_client(temp_db_path: Path, mock_settings) -> AsyncGenerator:
    """SQLiteTableClient over a migrated temporary database."""
    import intellectory.infrastructure.storage.sqlite.connection as conn_module
    from intellectory.infrastructure.storage.sqlite.migrations import initialize_database
    from intellectory.infrastructure.storage.sqlite.table_client import SQLiteTableClient

    results = await initialize_database(db_path=temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield SQLiteTableClient()
        finally:
            await conn_module.close_pool()


@pytest.fixture(autouse=True)
def _fresh_services():
    """Drop cached service singletons between tests."""
    reset_services()
    yield
    reset_services()
