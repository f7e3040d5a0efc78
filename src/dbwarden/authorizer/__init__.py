"""Per-connection SQL authorizer: decides every object reference SQLite compiles."""

from __future__ import annotations

import logging

from dbwarden.authorizer import actions
from dbwarden.authorizer._types import (
    Outcome,
    Permission,
    Verdict,
    format_permissions,
    parse_permissions,
)
from dbwarden.authorizer.actions import Action, describe
from dbwarden.authorizer.decide import Decision, Policy, allow_write, decide
from dbwarden.authorizer.functions import DEFAULT_FUNCTIONS, FunctionAllowlist
from dbwarden.authorizer.state import AuthorizerState
from dbwarden.diagnostics import Diagnostic, codes

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_TABLE = "__dbwarden_info__"


class DatabaseAuthorizer:
    """Authorization policy for one connection.

    Created once with the name of the connection's metadata table. The
    connection owner toggles `enable()`/`disable()` around untrusted SQL,
    configures permissions before each statement, and polls the outcome
    properties after it finishes.
    """

    def __init__(
        self,
        protected_table: str = DEFAULT_PROTECTED_TABLE,
        *,
        functions: FunctionAllowlist | None = None,
        state: AuthorizerState | None = None,
    ) -> None:
        self.policy = Policy(
            protected_table=protected_table,
            functions=functions if functions is not None else FunctionAllowlist(),
        )
        self.state = state if state is not None else AuthorizerState()
        self.last_denial: Diagnostic | None = None
        self.reset()

    # -- Dispatch ---------------------------------------------------------------

    def check(self, action: Action) -> Verdict:
        decision = decide(action, self.state, self.policy)
        self.state.apply(decision.effects)
        if not decision.allowed:
            self._record_denial(action, decision)
        return decision.verdict

    def check_unrecognised(self, code: int) -> Verdict:
        """Answer an action code with no Action variant: deny it while enabled."""
        if not self.state.enabled:
            return Verdict.ALLOW
        logger.warning("denied unrecognised authorizer action code %d", code)
        self.last_denial = Diagnostic.error(
            codes.UNKNOWN_ACTION, f"not authorized: action code {code}"
        )
        return Verdict.DENY

    def _record_denial(self, action: Action, decision: Decision) -> None:
        what = describe(action)
        reason = decision.reason or codes.UNKNOWN_ACTION
        logger.debug("denied %s (%s)", what, reason)
        diag = Diagnostic.error(reason, f"not authorized: {what}")
        if self.state.permissions:
            diag.note(f"permissions: {format_permissions(self.state.permissions)}")
        if reason == codes.PROTECTED_TABLE:
            diag.note(f"'{self.policy.protected_table}' is reserved for the connection")
        self.last_denial = diag

    # -- Administration -----------------------------------------------------------

    def enable(self) -> None:
        self.state.enabled = True

    def disable(self) -> None:
        self.state.enabled = False

    def set_read_only(self) -> None:
        self.state.permissions |= Permission.READ_ONLY

    def set_permissions(self, permissions: Permission | int) -> None:
        self.state.permissions = Permission(permissions)

    def reset(self) -> None:
        self.state.reset()
        self.last_denial = None

    def reset_deletes(self) -> None:
        self.state.reset_deletes()

    # -- Outcome ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self.state.enabled

    @property
    def permissions(self) -> Permission:
        return self.state.permissions

    @property
    def protected_table(self) -> str:
        return self.policy.protected_table

    @property
    def last_action_was_insert(self) -> bool:
        return self.state.was_insert

    @property
    def last_action_changed_database(self) -> bool:
        return self.state.changed_database

    @property
    def had_deletes(self) -> bool:
        return self.state.had_deletes

    def allow_write(self) -> bool:
        return allow_write(self.state)

    # -- One method per action kind -------------------------------------------------

    def create_table(self, table: str) -> Verdict:
        return self.check(actions.CreateTable(table))

    def create_temp_table(self, table: str) -> Verdict:
        return self.check(actions.CreateTable(table, temp=True))

    def drop_table(self, table: str) -> Verdict:
        return self.check(actions.DropTable(table))

    def drop_temp_table(self, table: str) -> Verdict:
        return self.check(actions.DropTable(table, temp=True))

    def alter_table(self, database: str, table: str) -> Verdict:
        return self.check(actions.AlterTable(database, table))

    def create_index(self, index: str, table: str) -> Verdict:
        return self.check(actions.CreateIndex(index, table))

    def create_temp_index(self, index: str, table: str) -> Verdict:
        return self.check(actions.CreateIndex(index, table, temp=True))

    def drop_index(self, index: str, table: str) -> Verdict:
        return self.check(actions.DropIndex(index, table))

    def drop_temp_index(self, index: str, table: str) -> Verdict:
        return self.check(actions.DropIndex(index, table, temp=True))

    def create_trigger(self, trigger: str, table: str) -> Verdict:
        return self.check(actions.CreateTrigger(trigger, table))

    def create_temp_trigger(self, trigger: str, table: str) -> Verdict:
        return self.check(actions.CreateTrigger(trigger, table, temp=True))

    def drop_trigger(self, trigger: str, table: str) -> Verdict:
        return self.check(actions.DropTrigger(trigger, table))

    def drop_temp_trigger(self, trigger: str, table: str) -> Verdict:
        return self.check(actions.DropTrigger(trigger, table, temp=True))

    def create_view(self, view: str) -> Verdict:
        return self.check(actions.CreateView(view))

    def create_temp_view(self, view: str) -> Verdict:
        return self.check(actions.CreateView(view, temp=True))

    def drop_view(self, view: str) -> Verdict:
        return self.check(actions.DropView(view))

    def drop_temp_view(self, view: str) -> Verdict:
        return self.check(actions.DropView(view, temp=True))

    def create_virtual_table(self, table: str, module: str) -> Verdict:
        return self.check(actions.CreateVirtualTable(table, module))

    def drop_virtual_table(self, table: str, module: str) -> Verdict:
        return self.check(actions.DropVirtualTable(table, module))

    def delete(self, table: str) -> Verdict:
        return self.check(actions.Delete(table))

    def insert(self, table: str) -> Verdict:
        return self.check(actions.Insert(table))

    def update(self, table: str, column: str) -> Verdict:
        return self.check(actions.Update(table, column))

    def begin_transaction(self, operation: str = "") -> Verdict:
        return self.check(actions.Transaction(operation))

    def select(self) -> Verdict:
        return self.check(actions.Select())

    def read(self, table: str, column: str) -> Verdict:
        return self.check(actions.Read(table, column))

    def reindex(self, index: str) -> Verdict:
        return self.check(actions.Reindex(index))

    def analyze(self, table: str) -> Verdict:
        return self.check(actions.Analyze(table))

    def pragma(self, name: str, argument: str = "") -> Verdict:
        return self.check(actions.Pragma(name, argument))

    def attach(self, filename: str) -> Verdict:
        return self.check(actions.Attach(filename))

    def detach(self, database: str) -> Verdict:
        return self.check(actions.Detach(database))

    def function(self, name: str) -> Verdict:
        return self.check(actions.Function(name))


__all__ = [
    "DEFAULT_FUNCTIONS",
    "DEFAULT_PROTECTED_TABLE",
    "Action",
    "AuthorizerState",
    "DatabaseAuthorizer",
    "Decision",
    "FunctionAllowlist",
    "Outcome",
    "Permission",
    "Policy",
    "Verdict",
    "decide",
    "format_permissions",
    "parse_permissions",
]
