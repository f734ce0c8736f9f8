import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from config import CONFIG_DIR, get_config_value
from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION
from .store import SqliteRecordStore

logger = logging.getLogger(__name__)

DB_PATH = CONFIG_DIR / "linebyline.db"


def resolve_db_path() -> Path:
    """Configured database path, falling back to ~/.linebyline/linebyline.db."""
    configured = get_config_value("database", "path")
    if configured:
        return Path(configured).expanduser()
    return DB_PATH


def init_db(db_path: Optional[Path] = None) -> None:
    """Initialize the database by creating tables and indexes if they don't exist."""
    path = db_path or resolve_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with get_conn(path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.executescript(INDEXES_SQL)
        ensure_schema_version(conn)
        conn.commit()
    logger.info("Database ready at %s", path)


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0


def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")


def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)


@contextmanager
def get_conn(db_path: Optional[Path] = None):
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(db_path or resolve_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        yield conn
    finally:
        conn.close()


def get_store():
    """FastAPI dependency that yields a record store bound to one connection."""
    with get_conn() as conn:
        yield SqliteRecordStore(conn)
