"""Intellectory: stock and returnable bin tracking service."""

__version__ = "1.0.0"
