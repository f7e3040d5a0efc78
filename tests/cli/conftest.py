"""CLI fixtures: a seeded database file and an isolated home for profiles and logs."""

import sqlite3
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setattr("dbwarden.profiles._PROFILES_FILE", tmp_path / "home" / "profiles.toml")
    monkeypatch.setattr("dbwarden.querylog._LOG_ROOT", tmp_path / "home" / "logs")
    return tmp_path / "home"


@pytest.fixture
def db_path(tmp_path) -> Path:
    path = tmp_path / "app.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
    conn.execute("INSERT INTO users (id, name) VALUES (1, 'alice'), (2, 'bob')")
    conn.commit()
    conn.close()
    return path
