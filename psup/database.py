"""
Database configuration module.
Sets up SQLAlchemy with a local SQLite file.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base

from .config import DATA_DIR, DB_FILENAME, DATABASE_URL

logger = logging.getLogger(__name__)

# Base class for ORM models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the format stored in every table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def resolve_database_url(database_url: Optional[str] = None) -> str:
    """
    Pick the database URL: explicit argument, then DATABASE_URL, then the
    default file inside the application data directory.
    """
    url = database_url or DATABASE_URL
    if url:
        return url
    return f"sqlite:///{Path(DATA_DIR) / DB_FILENAME}"


def ensure_parent_dir(database_url: str) -> None:
    """Create the directory holding a file-backed SQLite database."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return
    if not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Create the engine for the local store, making its directory if needed."""
    url = resolve_database_url(database_url)
    ensure_parent_dir(url)
    logger.info(f"Opening database: {url}")

    if url.startswith("sqlite"):
        # One process, many threads; access is serialized by the store lock
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)
