"""Database connectors for Slug Guard."""

from slug_guard.connectors.sqlite import SQLiteConnector

__all__ = ["SQLiteConnector"]
