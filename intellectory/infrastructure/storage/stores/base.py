"""Shared plumbing for the table-backed stores."""

import json
from typing import Any

from pydantic import BaseModel

from intellectory.core.interfaces.table_client import ITableClient, Row
from intellectory.infrastructure.storage.factory import get_table_client


def to_row(model: BaseModel, exclude: set[str] | None = None) -> Row:
    """Entity to row; an unset id is left for the store to generate."""
    row = model.model_dump(mode="json", exclude=exclude)
    if row.get("id") is None:
        row.pop("id", None)
    return row


def load_json(value: Any) -> dict[str, Any]:
    """JSON text column to dict; hosted stores may already return a dict."""
    if isinstance(value, dict):
        return value
    if not value:
        return {}
    return json.loads(value)


class TableStore:
    """Base for stores that talk to an ITableClient."""

    def __init__(self, client: ITableClient | None = None):
        self._client = client

    @property
    def client(self) -> ITableClient:
        if self._client is None:
            self._client = get_table_client()
        return self._client
