"""Test translation of sqlite3 authorizer callbacks into actions."""

import sqlite3

import pytest

from dbwarden.authorizer import DatabaseAuthorizer, Verdict
from dbwarden.authorizer import actions as a
from dbwarden.authorizer.sqlite import action_from_sqlite, install, make_callback


class TestActionFromSqlite:
    @pytest.mark.parametrize(
        ("code", "arg1", "arg2", "expected"),
        [
            (sqlite3.SQLITE_CREATE_TABLE, "t", None, a.CreateTable("t")),
            (sqlite3.SQLITE_CREATE_TEMP_TABLE, "t", None, a.CreateTable("t", temp=True)),
            (sqlite3.SQLITE_DROP_TEMP_TRIGGER, "tr", "t", a.DropTrigger("tr", "t", temp=True)),
            (sqlite3.SQLITE_CREATE_INDEX, "i", "t", a.CreateIndex("i", "t")),
            (sqlite3.SQLITE_ALTER_TABLE, "main", "t", a.AlterTable("main", "t")),
            (sqlite3.SQLITE_CREATE_VTABLE, "docs", "fts3", a.CreateVirtualTable("docs", "fts3")),
            (sqlite3.SQLITE_DROP_VIEW, "v", None, a.DropView("v")),
            (sqlite3.SQLITE_INSERT, "t", None, a.Insert("t")),
            (sqlite3.SQLITE_UPDATE, "t", "c", a.Update("t", "c")),
            (sqlite3.SQLITE_READ, "t", "c", a.Read("t", "c")),
            (sqlite3.SQLITE_SELECT, None, None, a.Select()),
            (sqlite3.SQLITE_TRANSACTION, "BEGIN", None, a.Transaction("BEGIN")),
            (sqlite3.SQLITE_PRAGMA, "user_version", None, a.Pragma("user_version", "")),
            (sqlite3.SQLITE_ATTACH, "x.db", None, a.Attach("x.db")),
            (sqlite3.SQLITE_DETACH, "x", None, a.Detach("x")),
            (sqlite3.SQLITE_FUNCTION, None, "upper", a.Function("upper")),
            (sqlite3.SQLITE_REINDEX, "i", None, a.Reindex("i")),
            (sqlite3.SQLITE_ANALYZE, "t", None, a.Analyze("t")),
        ],
    )
    def test_mapping(self, code, arg1, arg2, expected) -> None:
        assert action_from_sqlite(code, arg1, arg2) == expected

    def test_unknown_code(self) -> None:
        assert action_from_sqlite(sqlite3.SQLITE_SAVEPOINT, "BEGIN", "sp") is None
        assert action_from_sqlite(sqlite3.SQLITE_RECURSIVE, None, None) is None


class TestCallback:
    def test_returns_plain_ints(self) -> None:
        auth = DatabaseAuthorizer("meta")
        auth.enable()
        callback = make_callback(auth)
        assert callback(sqlite3.SQLITE_INSERT, "meta", None, "main", None) == sqlite3.SQLITE_DENY
        assert callback(sqlite3.SQLITE_INSERT, "t", None, "main", None) == sqlite3.SQLITE_OK
        assert type(callback(sqlite3.SQLITE_SELECT, None, None, None, None)) is int

    def test_unknown_code_follows_enabled(self) -> None:
        auth = DatabaseAuthorizer("meta")
        callback = make_callback(auth)
        assert callback(sqlite3.SQLITE_SAVEPOINT, "BEGIN", "sp", None, None) == Verdict.ALLOW
        auth.enable()
        assert callback(sqlite3.SQLITE_SAVEPOINT, "BEGIN", "sp", None, None) == Verdict.DENY


class TestInstalled:
    def test_sqlite_compiler_consults_authorizer(self) -> None:
        conn = sqlite3.connect(":memory:", isolation_level=None)
        auth = DatabaseAuthorizer("meta")
        install(conn, auth)
        conn.execute("CREATE TABLE meta (k TEXT)")

        auth.enable()
        install(conn, auth)
        # A denied column read is reported as "access to meta.k is prohibited".
        with pytest.raises(sqlite3.DatabaseError, match="prohibited"):
            conn.execute("SELECT k FROM meta")
        with pytest.raises(sqlite3.DatabaseError, match="not authorized"):
            conn.execute("INSERT INTO meta (k) VALUES ('x')")
        conn.close()
