"""Shared fixtures."""

from __future__ import annotations

import pytest

from dbwarden.authorizer import DatabaseAuthorizer
from dbwarden.database import GuardedDatabase

PROTECTED = "meta"


@pytest.fixture
def authorizer() -> DatabaseAuthorizer:
    """Enabled authorizer guarding the `meta` table, read-write."""
    auth = DatabaseAuthorizer(PROTECTED)
    auth.enable()
    return auth


@pytest.fixture
def db():
    """In-memory guarded database with a `users` table and two rows."""
    database = GuardedDatabase(":memory:", protected_table=PROTECTED)
    database.execute_trusted("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
    database.execute_trusted("INSERT INTO users (id, name) VALUES (1, 'alice'), (2, 'bob')")
    yield database
    database.close()
