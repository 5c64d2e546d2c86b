"""Tests for the unconfigured-store client and the client factory."""

from unittest.mock import MagicMock, patch

import pytest

from intellectory.core.exceptions import StoreUnavailableError
from intellectory.infrastructure.storage import factory
from intellectory.infrastructure.storage.retry import RetryingTableClient
from intellectory.infrastructure.storage.unavailable import UnavailableTableClient


class TestUnavailableTableClient:
    async def test_every_call_raises(self):
        client = UnavailableTableClient("STORAGE_REST_URL is not set")

        with pytest.raises(StoreUnavailableError, match="STORAGE_REST_URL"):
            await client.select("teams")
        with pytest.raises(StoreUnavailableError):
            await client.insert("teams", {"name": "x"})
        with pytest.raises(StoreUnavailableError):
            await client.ping()


def _settings(backend: str, rest_url: str | None = None, rest_key: str | None = None):
    settings = MagicMock()
    settings.storage.backend = backend
    settings.storage.rest_url = rest_url
    settings.storage.rest_key = rest_key
    settings.storage.rest_configured = bool(rest_url and rest_key)
    settings.storage.rest_timeout = 5.0
    settings.storage.retry_attempts = 2
    settings.storage.retry_base_delay = 0.01
    return settings


class TestCreateTableClient:
    """Backend selection."""

    def test_sqlite_is_wrapped_with_retries(self):
        with patch.object(factory, "get_settings", return_value=_settings("sqlite")):
            client = factory.create_table_client()

        assert isinstance(client, RetryingTableClient)
        assert client.attempts == 2

    def test_rest_without_config_is_unavailable(self):
        with patch.object(factory, "get_settings", return_value=_settings("rest", rest_url="https://x")):
            client = factory.create_table_client()

        assert isinstance(client, UnavailableTableClient)

    def test_rest_with_config(self):
        settings = _settings("rest", rest_url="https://store.example.com", rest_key="k")
        with patch.object(factory, "get_settings", return_value=settings):
            client = factory.create_table_client()

        assert isinstance(client, RetryingTableClient)
        assert client.inner.base_url == "https://store.example.com"

    def test_unknown_backend(self):
        with patch.object(factory, "get_settings", return_value=_settings("sqlite")):
            with pytest.raises(ValueError, match="Unknown storage backend"):
                factory.create_table_client("mongo")
