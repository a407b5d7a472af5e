"""Database factory functions."""

import os
from pathlib import Path
from typing import Optional

from buildledger.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "BUILDLEDGER_DB_PATH"
DEFAULT_DB_DIR = ".buildledger"
DEFAULT_DB_NAME = "buildledger.db"


def resolve_database_path(database_path: Optional[str] = None) -> str:
    """Pick the SQLite file: explicit path, then BUILDLEDGER_DB_PATH, then ~/.buildledger/buildledger.db.

    The default directory is created on first use.
    """
    if database_path:
        return database_path

    from_env = os.environ.get(DB_PATH_ENV)
    if from_env:
        return from_env

    db_dir = Path.home() / DEFAULT_DB_DIR
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / DEFAULT_DB_NAME)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a ledger database backed by a SQLite file."""
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
