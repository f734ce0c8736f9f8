import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import pytest

import config
from db import database
from db.schema import INDEXES_SQL, SCHEMA_SQL
from db.store import SqliteRecordStore

ENV_OVERRIDES = (
    "LINEBYLINE_DB_PATH",
    "LINEBYLINE_HOST",
    "LINEBYLINE_PORT",
    "LINEBYLINE_LOG_LEVEL",
    "LINEBYLINE_AUTO_UNLOCK",
    "LINEBYLINE_MASK_PLACEHOLDER",
)


@pytest.fixture
def conn():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    conn.executescript(SCHEMA_SQL)
    conn.executescript(INDEXES_SQL)
    yield conn
    conn.close()


@pytest.fixture
def store(conn):
    return SqliteRecordStore(conn)


@pytest.fixture
def now():
    return datetime(2026, 1, 30, 9, 0, tzinfo=timezone.utc)


def write_test_config(config_path: Path, db_path: Path, auto_unlock: bool = True) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[database]",
                f"path = \"{db_path.as_posix()}\"",
                "",
                "[logging]",
                "level = \"DEBUG\"",
                "",
                "[review]",
                f"auto_unlock = {'true' if auto_unlock else 'false'}",
                "mask_placeholder = \"___\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def write_config():
    return write_test_config


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    config_dir = tmp_path / ".linebyline"
    config_dir.mkdir()
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")
    monkeypatch.setattr(database, "DB_PATH", config_dir / "linebyline.db")
    return config_dir


@pytest.fixture
def client(config_dir):
    from fastapi.testclient import TestClient
    from main import app

    write_test_config(config_dir / "config.toml", config_dir / "linebyline.db")
    database.init_db()
    return TestClient(app)
