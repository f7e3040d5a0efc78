"""Integration tests: untrusted SQL compiled by SQLite under the authorizer."""

import sqlite3
from unittest.mock import patch

import pytest

from dbwarden.authorizer import Permission
from dbwarden.database import GuardedDatabase, GuardedDatabaseError
from dbwarden.diagnostics import codes


def _codes(result) -> set:
    return {d.code for d in result.diagnostics}


class TestProtectedTable:
    def test_created_on_open(self, db: GuardedDatabase) -> None:
        db.set_metadata("version", "1")
        assert db.get_metadata("version") == "1"
        assert db.get_metadata("missing") is None

    def test_select_denied(self, db: GuardedDatabase) -> None:
        result = db.execute("SELECT key FROM meta")
        assert result.blocked
        assert codes.PROTECTED_TABLE in _codes(result)
        assert codes.STATEMENT_DENIED in _codes(result)

    def test_insert_denied_but_marked(self, db: GuardedDatabase) -> None:
        result = db.execute("INSERT INTO META (key, value) VALUES ('a', 'b')")
        assert result.blocked
        assert result.was_insert
        assert db.get_metadata("a") is None

    def test_cached_trusted_statement_is_reauthorized(self, db: GuardedDatabase) -> None:
        db.execute_trusted("SELECT key FROM meta")
        result = db.execute("SELECT key FROM meta")
        assert result.blocked


class TestReadWrite:
    def test_select(self, db: GuardedDatabase) -> None:
        result = db.execute("SELECT id, name FROM users ORDER BY id")
        assert not result.failed
        assert result.columns == ["id", "name"]
        assert result.rows == [{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]
        assert not result.changed_database
        assert not db.changes_pending()

    def test_insert(self, db: GuardedDatabase) -> None:
        result = db.execute("INSERT INTO users (id, name) VALUES (?, ?)", (3, "carol"))
        assert not result.failed
        assert result.was_insert
        assert result.changed_database
        assert db.changes_pending()
        assert db.execute_trusted("SELECT count(*) FROM users") == [(3,)]

    def test_delete_marks_deletes(self, db: GuardedDatabase) -> None:
        result = db.execute("DELETE FROM users WHERE id = 1")
        assert not result.failed
        assert result.had_deletes

    def test_standalone_statements_reset_deletes(self, db: GuardedDatabase) -> None:
        db.execute("DELETE FROM users WHERE id = 1")
        result = db.execute("SELECT name FROM users")
        assert not result.had_deletes

    def test_create_table(self, db: GuardedDatabase) -> None:
        result = db.execute("CREATE TABLE notes (body TEXT)")
        assert not result.failed
        assert result.changed_database

    def test_create_protected_name_denied(self, db: GuardedDatabase) -> None:
        result = db.execute("CREATE TABLE IF NOT EXISTS Meta (x TEXT)")
        assert result.blocked


class TestRestrictedModes:
    def test_read_only_allows_select(self, db: GuardedDatabase) -> None:
        result = db.execute("SELECT name FROM users", permissions=Permission.READ_ONLY)
        assert not result.failed
        assert result.row_count == 2

    def test_read_only_denies_insert(self, db: GuardedDatabase) -> None:
        result = db.execute(
            "INSERT INTO users (id, name) VALUES (3, 'x')", permissions=Permission.READ_ONLY
        )
        assert result.blocked
        assert codes.WRITE_BLOCKED in _codes(result)
        assert not result.was_insert

    def test_no_access_denies_select(self, db: GuardedDatabase) -> None:
        result = db.execute("SELECT name FROM users", permissions=Permission.NO_ACCESS)
        assert result.blocked
        assert codes.READ_BLOCKED in _codes(result)

    def test_permissions_reset_between_statements(self, db: GuardedDatabase) -> None:
        db.execute("SELECT name FROM users", permissions=Permission.NO_ACCESS)
        assert not db.execute("SELECT name FROM users").failed


class TestEnabledOnlyGates:
    def test_function_allowlist(self, db: GuardedDatabase) -> None:
        assert not db.execute("SELECT upper(name) FROM users").failed
        result = db.execute("SELECT random()")
        assert result.blocked
        assert codes.FUNCTION_NOT_ALLOWED in _codes(result)

    def test_pragma_denied(self, db: GuardedDatabase) -> None:
        result = db.execute("PRAGMA user_version")
        assert result.blocked
        assert codes.PRAGMA_BLOCKED in _codes(result)

    def test_attach_denied(self, db: GuardedDatabase) -> None:
        result = db.execute("ATTACH DATABASE ':memory:' AS other")
        assert result.blocked
        assert codes.ATTACH_BLOCKED in _codes(result)

    def test_transaction_denied(self, db: GuardedDatabase) -> None:
        result = db.execute("BEGIN")
        assert result.blocked
        assert codes.TRANSACTION_BLOCKED in _codes(result)

    def test_non_fts3_virtual_table_denied(self, db: GuardedDatabase) -> None:
        result = db.execute("CREATE VIRTUAL TABLE docs USING fts5(body)")
        assert result.blocked

    def test_trusted_sql_unrestricted(self, db: GuardedDatabase) -> None:
        assert db.execute_trusted("PRAGMA user_version") == [(0,)]


class TestCheck:
    def test_check_does_not_execute(self, db: GuardedDatabase) -> None:
        result = db.check("DELETE FROM users WHERE id = 1")
        assert not result.failed
        assert result.had_deletes
        assert db.execute_trusted("SELECT count(*) FROM users") == [(2,)]

    def test_check_reports_denial(self, db: GuardedDatabase) -> None:
        result = db.check("UPDATE meta SET value = 'x'")
        assert result.blocked


class TestScript:
    def test_statements_run_as_written(self, db: GuardedDatabase) -> None:
        script = db.execute_script(
            "SELECT substr(name, 1, 2) AS s FROM users ORDER BY id; SELECT ifnull(NULL, 1) AS v;"
        )
        assert script.committed
        assert not script.blocked
        assert script.statements[0].sql == "SELECT substr(name, 1, 2) AS s FROM users ORDER BY id"
        assert script.statements[0].rows == [{"s": "al"}, {"s": "bo"}]
        assert script.statements[1].rows == [{"v": 1}]

    def test_commits(self, db: GuardedDatabase) -> None:
        script = db.execute_script(
            "INSERT INTO users (id, name) VALUES (3, 'c'); DELETE FROM users WHERE id = 1;"
        )
        assert script.committed
        assert not script.failed
        assert len(script.statements) == 2
        assert script.changed_database
        assert script.had_deletes
        assert db.execute_trusted("SELECT id FROM users ORDER BY id") == [(2,), (3,)]

    def test_deletes_accumulate_across_statements(self, db: GuardedDatabase) -> None:
        script = db.execute_script(
            "DELETE FROM users WHERE id = 1; INSERT INTO users (id, name) VALUES (4, 'd')"
        )
        assert script.statements[1].had_deletes

    def test_rolls_back_on_denial(self, db: GuardedDatabase) -> None:
        script = db.execute_script(
            "INSERT INTO users (id, name) VALUES (3, 'c'); "
            "INSERT INTO meta (key, value) VALUES ('x', 'y'); "
            "DELETE FROM users WHERE id = 2"
        )
        assert not script.committed
        assert script.blocked
        assert len(script.statements) == 2
        assert codes.STATEMENT_DENIED in {d.code for d in script.diagnostics}
        assert db.execute_trusted("SELECT count(*) FROM users") == [(2,)]

    def test_rolls_back_on_sqlite_error(self, db: GuardedDatabase) -> None:
        script = db.execute_script(
            "INSERT INTO users (id, name) VALUES (3, 'c'); INSERT INTO missing (x) VALUES (1)"
        )
        assert not script.committed
        assert script.failed
        assert not script.blocked
        assert db.execute_trusted("SELECT count(*) FROM users") == [(2,)]

    def test_syntax_error(self, db: GuardedDatabase) -> None:
        script = db.execute_script("SELECT 'unclosed")
        assert script.failed
        assert codes.SYNTAX_ERROR in {d.code for d in script.diagnostics}
        assert script.statements == []


class TestErrors:
    def test_sqlite_error_is_not_a_denial(self, db: GuardedDatabase) -> None:
        result = db.execute("SELECT * FROM missing")
        assert result.failed
        assert not result.blocked
        assert codes.EXECUTION_ERROR in _codes(result)

    def test_closed(self) -> None:
        database = GuardedDatabase(":memory:")
        database.close()
        with pytest.raises(GuardedDatabaseError, match="closed"):
            database.execute("SELECT 1")

    def test_open_failure(self, tmp_path) -> None:
        with pytest.raises(GuardedDatabaseError):
            GuardedDatabase(tmp_path / "missing" / "db.sqlite")

    def test_failed_open_closes_connection(self, tmp_path) -> None:
        path = tmp_path / "notes.txt"
        path.write_bytes(b"not a sqlite database\n" * 64)
        opened: list[sqlite3.Connection] = []
        real_connect = sqlite3.connect

        def connect(*args, **kwargs):
            conn = real_connect(*args, **kwargs)
            opened.append(conn)
            return conn

        with patch("dbwarden.database.sqlite3.connect", side_effect=connect):
            with pytest.raises(GuardedDatabaseError, match="not a database"):
                GuardedDatabase(path)

        assert len(opened) == 1
        with pytest.raises(sqlite3.ProgrammingError):
            opened[0].execute("SELECT 1")

    def test_file_database(self, tmp_path) -> None:
        path = tmp_path / "app.db"
        with GuardedDatabase(path, protected_table="info") as database:
            database.execute("CREATE TABLE t (x INTEGER)")
            database.execute("INSERT INTO t (x) VALUES (1)")
        with GuardedDatabase(path, protected_table="info") as database:
            assert database.execute("SELECT x FROM t").rows == [{"x": 1}]
            assert database.execute("SELECT * FROM info").blocked
