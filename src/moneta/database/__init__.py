"""Database layer for moneta application."""

from moneta.database.base import Database
from moneta.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
