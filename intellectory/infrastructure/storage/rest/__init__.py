"""Hosted REST backend."""

from intellectory.infrastructure.storage.rest.client import RestTableClient

__all__ = ["RestTableClient"]
