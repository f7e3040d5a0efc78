"""Bridge between `sqlite3.Connection.set_authorizer` and the authorizer.

SQLite passes an action code and up to four strings (two action-specific
arguments, the database name and the innermost trigger or view). Every code
the authorizer knows is translated into an `Action`; anything else is denied
while the authorizer is enabled.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from functools import partial

from dbwarden.authorizer import DatabaseAuthorizer
from dbwarden.authorizer import actions as a

AuthorizerCallback = Callable[[int, str | None, str | None, str | None, str | None], int]

_TWO_ARG: dict[int, Callable[[str, str], a.Action]] = {
    sqlite3.SQLITE_CREATE_INDEX: a.CreateIndex,
    sqlite3.SQLITE_CREATE_TEMP_INDEX: partial(a.CreateIndex, temp=True),
    sqlite3.SQLITE_DROP_INDEX: a.DropIndex,
    sqlite3.SQLITE_DROP_TEMP_INDEX: partial(a.DropIndex, temp=True),
    sqlite3.SQLITE_CREATE_TRIGGER: a.CreateTrigger,
    sqlite3.SQLITE_CREATE_TEMP_TRIGGER: partial(a.CreateTrigger, temp=True),
    sqlite3.SQLITE_DROP_TRIGGER: a.DropTrigger,
    sqlite3.SQLITE_DROP_TEMP_TRIGGER: partial(a.DropTrigger, temp=True),
    sqlite3.SQLITE_ALTER_TABLE: a.AlterTable,
    sqlite3.SQLITE_CREATE_VTABLE: a.CreateVirtualTable,
    sqlite3.SQLITE_DROP_VTABLE: a.DropVirtualTable,
    sqlite3.SQLITE_UPDATE: a.Update,
    sqlite3.SQLITE_READ: a.Read,
    sqlite3.SQLITE_PRAGMA: a.Pragma,
    # Function names arrive in the second argument; the first is always NULL.
    sqlite3.SQLITE_FUNCTION: lambda _, name: a.Function(name),
}

_ONE_ARG: dict[int, Callable[[str], a.Action]] = {
    sqlite3.SQLITE_CREATE_TABLE: a.CreateTable,
    sqlite3.SQLITE_CREATE_TEMP_TABLE: partial(a.CreateTable, temp=True),
    sqlite3.SQLITE_DROP_TABLE: a.DropTable,
    sqlite3.SQLITE_DROP_TEMP_TABLE: partial(a.DropTable, temp=True),
    sqlite3.SQLITE_CREATE_VIEW: a.CreateView,
    sqlite3.SQLITE_CREATE_TEMP_VIEW: partial(a.CreateView, temp=True),
    sqlite3.SQLITE_DROP_VIEW: a.DropView,
    sqlite3.SQLITE_DROP_TEMP_VIEW: partial(a.DropView, temp=True),
    sqlite3.SQLITE_DELETE: a.Delete,
    sqlite3.SQLITE_INSERT: a.Insert,
    sqlite3.SQLITE_TRANSACTION: a.Transaction,
    sqlite3.SQLITE_REINDEX: a.Reindex,
    sqlite3.SQLITE_ANALYZE: a.Analyze,
    sqlite3.SQLITE_ATTACH: a.Attach,
    sqlite3.SQLITE_DETACH: a.Detach,
}


def action_from_sqlite(
    code: int,
    arg1: str | None,
    arg2: str | None,
    db_name: str | None = None,
    trigger: str | None = None,
) -> a.Action | None:
    """Translate one SQLite authorizer callback into an Action, or None if unknown."""
    if code == sqlite3.SQLITE_SELECT:
        return a.Select()
    if code in _ONE_ARG:
        return _ONE_ARG[code](arg1 or "")
    if code in _TWO_ARG:
        return _TWO_ARG[code](arg1 or "", arg2 or "")
    return None


def make_callback(authorizer: DatabaseAuthorizer) -> AuthorizerCallback:
    def _callback(
        code: int,
        arg1: str | None,
        arg2: str | None,
        db_name: str | None,
        trigger: str | None,
    ) -> int:
        action = action_from_sqlite(code, arg1, arg2, db_name, trigger)
        if action is None:
            return int(authorizer.check_unrecognised(code))
        return int(authorizer.check(action))

    return _callback


def install(conn: sqlite3.Connection, authorizer: DatabaseAuthorizer) -> None:
    """Register the authorizer on a connection.

    Registering again expires the connection's prepared statements, so
    statements compiled under one setting are re-authorized under the next.
    """
    conn.set_authorizer(make_callback(authorizer))


def uninstall(conn: sqlite3.Connection) -> None:
    conn.set_authorizer(None)
