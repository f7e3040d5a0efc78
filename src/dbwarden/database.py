"""SQLite connection guarded by a DatabaseAuthorizer.

Trusted SQL (issued by this module) runs with the authorizer disabled.
Untrusted SQL runs with it enabled and the requested permissions applied,
one statement at a time, and reports the authorizer's outcome flags so the
caller can decide whether to announce a change.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterator, Sequence
from pathlib import Path

from dbwarden.authorizer import (
    DEFAULT_PROTECTED_TABLE,
    DatabaseAuthorizer,
    FunctionAllowlist,
    Permission,
    format_permissions,
)
from dbwarden.authorizer.sqlite import install, uninstall
from dbwarden.diagnostics import Diagnostic, ScriptResult, StatementResult, codes
from dbwarden.statements import StatementSplitError, split_statements

logger = logging.getLogger(__name__)

Params = Sequence[object] | dict[str, object]


class GuardedDatabaseError(Exception):
    """Raised when the database cannot be opened or trusted SQL fails."""


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class GuardedDatabase:
    """One SQLite connection and the authorizer that owns its policy."""

    def __init__(
        self,
        path: str | Path = ":memory:",
        *,
        protected_table: str = DEFAULT_PROTECTED_TABLE,
        functions: FunctionAllowlist | None = None,
    ) -> None:
        self.path = str(path)
        self.authorizer = DatabaseAuthorizer(protected_table, functions=functions)
        try:
            # Autocommit: transactions are opened explicitly by trusted code only.
            self._conn: sqlite3.Connection | None = sqlite3.connect(
                self.path, isolation_level=None
            )
        except sqlite3.Error as e:
            raise GuardedDatabaseError(f"could not open {self.path}: {e}") from e

        self._info_table = _quote_identifier(protected_table)
        try:
            install(self._conn, self.authorizer)
            self.execute_trusted(
                f"CREATE TABLE IF NOT EXISTS {self._info_table} "
                "(key TEXT NOT NULL PRIMARY KEY, value TEXT NOT NULL)"
            )
        except GuardedDatabaseError:
            self.close()
            raise

    # -- Lifecycle ------------------------------------------------------------------

    def close(self) -> None:
        if self._conn is not None:
            uninstall(self._conn)
            self._conn.close()
            self._conn = None

    def __enter__(self) -> GuardedDatabase:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _ensure_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise GuardedDatabaseError("database is closed")
        return self._conn

    # -- Trusted SQL ----------------------------------------------------------------

    def execute_trusted(self, sql: str, params: Params = ()) -> list[tuple]:
        """Run SQL issued by the application itself, bypassing the policy."""
        conn = self._ensure_conn()
        if self.authorizer.enabled:
            raise GuardedDatabaseError("trusted SQL issued while untrusted SQL is running")
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise GuardedDatabaseError(f"trusted statement failed: {e}") from e

    def set_metadata(self, key: str, value: str) -> None:
        self.execute_trusted(
            f"INSERT OR REPLACE INTO {self._info_table} (key, value) VALUES (?, ?)",
            (key, value),
        )

    def get_metadata(self, key: str) -> str | None:
        rows = self.execute_trusted(
            f"SELECT value FROM {self._info_table} WHERE key = ?", (key,)
        )
        return rows[0][0] if rows else None

    # -- Untrusted SQL ----------------------------------------------------------------

    @contextlib.contextmanager
    def _untrusted(self, permissions: Permission) -> Iterator[sqlite3.Connection]:
        conn = self._ensure_conn()
        self.authorizer.reset()
        self.authorizer.set_permissions(permissions)
        self.authorizer.enable()
        # Re-registering expires cached statements compiled while disabled.
        install(conn, self.authorizer)
        try:
            yield conn
        finally:
            self.authorizer.disable()
            install(conn, self.authorizer)

    def execute(
        self,
        sql: str,
        params: Params = (),
        *,
        permissions: Permission = Permission.READ_WRITE,
    ) -> StatementResult:
        """Run one untrusted statement as its own transaction."""
        self.authorizer.reset_deletes()
        return self._execute_one(sql, params, permissions=permissions)

    def check(
        self,
        sql: str,
        params: Params = (),
        *,
        permissions: Permission = Permission.READ_WRITE,
    ) -> StatementResult:
        """Compile one untrusted statement under the policy without running it."""
        self.authorizer.reset_deletes()
        return self._execute_one(sql, params, permissions=permissions, compile_only=True)

    def execute_script(
        self,
        sql: str,
        *,
        permissions: Permission = Permission.READ_WRITE,
    ) -> ScriptResult:
        """Run an untrusted script in one transaction, rolling back on the first failure.

        Delete evidence accumulates across the script's statements.
        """
        script = ScriptResult()
        try:
            statements = split_statements(sql)
        except StatementSplitError as e:
            script.diagnostics.append(Diagnostic.error(codes.SYNTAX_ERROR, str(e)))
            return script

        self.authorizer.reset_deletes()
        self.execute_trusted("BEGIN")
        for index, statement in enumerate(statements, start=1):
            result = self._execute_one(statement, (), permissions=permissions)
            script.statements.append(result)
            if result.failed:
                self.execute_trusted("ROLLBACK")
                code = codes.STATEMENT_DENIED if result.blocked else codes.EXECUTION_ERROR
                script.diagnostics.append(
                    Diagnostic.warning(code, f"script rolled back at statement {index}")
                    .note(f"{len(statements) - index} later statement(s) not run")
                )
                logger.info("script rolled back at statement %d of %d", index, len(statements))
                return script

        self.execute_trusted("COMMIT")
        script.committed = True
        return script

    def changes_pending(self) -> bool:
        """Whether the last untrusted statement changed the database or deleted data."""
        return self.authorizer.last_action_changed_database or self.authorizer.had_deletes

    def _execute_one(
        self,
        sql: str,
        params: Params,
        *,
        permissions: Permission,
        compile_only: bool = False,
    ) -> StatementResult:
        result = StatementResult(sql=sql)
        t0 = time.monotonic()
        with self._untrusted(permissions) as conn:
            try:
                if compile_only:
                    conn.execute(f"EXPLAIN {sql}", params)
                else:
                    cursor = conn.execute(sql, params)
                    columns = [d[0] for d in cursor.description] if cursor.description else []
                    rows_raw = cursor.fetchall()
                    result.columns = columns
                    result.rows = [dict(zip(columns, row, strict=True)) for row in rows_raw]
            except sqlite3.Error as e:
                self._record_failure(result, e, permissions)
        result.duration_ms = (time.monotonic() - t0) * 1000

        result.was_insert = self.authorizer.last_action_was_insert
        result.changed_database = self.authorizer.last_action_changed_database
        result.had_deletes = self.authorizer.had_deletes
        return result

    def _record_failure(
        self, result: StatementResult, error: sqlite3.Error, permissions: Permission
    ) -> None:
        denial = self.authorizer.last_denial
        if denial is not None:
            result.blocked = True
            result.diagnostics.append(denial)
            result.diagnostics.append(
                Diagnostic.error(codes.STATEMENT_DENIED, f"statement denied: {error}")
                .note(f"permissions: {format_permissions(permissions)}")
            )
            logger.info("statement denied: %s", denial.message)
            return

        result.diagnostics.append(
            Diagnostic.error(codes.EXECUTION_ERROR, f"SQLite error: {error}")
        )
