"""Database layer for buildledger application."""

from buildledger.database.base import Database
from buildledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
