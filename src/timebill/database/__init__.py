"""Database layer for timebill application."""

from timebill.database.base import Database
from timebill.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
