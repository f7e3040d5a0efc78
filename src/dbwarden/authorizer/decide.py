"""Pure authorization decisions.

`decide()` never mutates anything. It returns the verdict together with the
outcome flags the caller must record; `DatabaseAuthorizer.check()` applies
them. Flags are applied regardless of the verdict, which is how an insert that
passes the write gate but names the protected table still marks the
connection as having attempted an insert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import assert_never

from dbwarden.authorizer._types import Outcome, Permission, Verdict
from dbwarden.authorizer.actions import (
    Action,
    AlterTable,
    Analyze,
    Attach,
    CreateIndex,
    CreateTable,
    CreateTrigger,
    CreateVirtualTable,
    CreateView,
    Delete,
    Detach,
    DropIndex,
    DropTable,
    DropTrigger,
    DropView,
    DropVirtualTable,
    Function,
    Insert,
    Pragma,
    Read,
    Reindex,
    Select,
    Transaction,
    Update,
)
from dbwarden.authorizer.functions import FunctionAllowlist, equal_ignoring_case
from dbwarden.authorizer.state import AuthorizerState
from dbwarden.diagnostics import codes
from dbwarden.diagnostics.codes import DiagnosticCode

# Only the FTS3 extension may back a virtual table.
ALLOWED_VTABLE_MODULE = "fts3"


@dataclass(frozen=True)
class Policy:
    """Construction-time constants of one connection's authorizer."""

    protected_table: str
    functions: FunctionAllowlist = field(default_factory=FunctionAllowlist)


@dataclass(frozen=True)
class Decision:
    verdict: Verdict
    effects: Outcome = Outcome.NONE
    reason: DiagnosticCode | None = None

    @property
    def allowed(self) -> bool:
        return self.verdict == Verdict.ALLOW


ALLOW = Decision(Verdict.ALLOW)


def _deny(reason: DiagnosticCode, effects: Outcome = Outcome.NONE) -> Decision:
    return Decision(Verdict.DENY, effects=effects, reason=reason)


# -- Predicates -------------------------------------------------------------------


def allow_write(state: AuthorizerState) -> bool:
    restricted = state.permissions & (Permission.READ_ONLY | Permission.NO_ACCESS)
    return not (state.enabled and restricted)


def denied_by_table_name(table: str, state: AuthorizerState, policy: Policy) -> bool:
    if not state.enabled:
        return False
    return equal_ignoring_case(table, policy.protected_table)


def _check_table(
    table: str,
    state: AuthorizerState,
    policy: Policy,
    on_allow: Outcome = Outcome.NONE,
) -> Decision:
    if denied_by_table_name(table, state, policy):
        return _deny(codes.PROTECTED_TABLE)
    return Decision(Verdict.ALLOW, effects=on_allow)


def _track_deletes(table: str, state: AuthorizerState, policy: Policy) -> Decision:
    """Mark deletes only when the delete will actually happen."""
    return _check_table(table, state, policy, on_allow=Outcome.HAD_DELETES)


def _gate_when_enabled(state: AuthorizerState, reason: DiagnosticCode) -> Decision:
    return _deny(reason) if state.enabled else ALLOW


# -- Decision -----------------------------------------------------------------------


def decide(action: Action, state: AuthorizerState, policy: Policy) -> Decision:
    """Decide one object reference made while compiling a statement."""
    match action:
        case Select():
            return ALLOW

        case Read(table=table):
            if state.enabled and state.permissions & Permission.NO_ACCESS:
                return _deny(codes.READ_BLOCKED)
            return _check_table(table, state, policy)

        case Analyze(table=table):
            return _check_table(table, state, policy)

        case Transaction():
            return _gate_when_enabled(state, codes.TRANSACTION_BLOCKED)

        case Pragma():
            return _gate_when_enabled(state, codes.PRAGMA_BLOCKED)

        case Attach() | Detach():
            return _gate_when_enabled(state, codes.ATTACH_BLOCKED)

        case Function(name=name):
            if state.enabled and name not in policy.functions:
                return _deny(codes.FUNCTION_NOT_ALLOWED)
            return ALLOW

        case _ if not allow_write(state):
            # Everything below is a write.
            return _deny(codes.WRITE_BLOCKED)

        case CreateTable(table=table) | AlterTable(table=table):
            return _check_table(table, state, policy, on_allow=Outcome.CHANGED_DATABASE)

        case CreateIndex(table=table) | CreateTrigger(table=table):
            return _check_table(table, state, policy, on_allow=Outcome.CHANGED_DATABASE)

        case DropTable(table=table) | DropIndex(table=table) | DropTrigger(table=table):
            return _track_deletes(table, state, policy)

        case Delete(table=table):
            return _track_deletes(table, state, policy)

        case CreateView() | Reindex():
            return ALLOW

        case DropView():
            return Decision(Verdict.ALLOW, effects=Outcome.HAD_DELETES)

        case CreateVirtualTable(table=table, module=module):
            if not equal_ignoring_case(module, ALLOWED_VTABLE_MODULE):
                return _deny(codes.MODULE_NOT_ALLOWED)
            return _check_table(table, state, policy, on_allow=Outcome.CHANGED_DATABASE)

        case DropVirtualTable(table=table, module=module):
            if not equal_ignoring_case(module, ALLOWED_VTABLE_MODULE):
                return _deny(codes.MODULE_NOT_ALLOWED)
            return _track_deletes(table, state, policy)

        case Insert(table=table):
            # Insert flags are set before the table check, so they survive a denial.
            attempted = Outcome.WAS_INSERT | Outcome.CHANGED_DATABASE
            if denied_by_table_name(table, state, policy):
                return _deny(codes.PROTECTED_TABLE, effects=attempted)
            return Decision(Verdict.ALLOW, effects=attempted)

        case Update(table=table):
            return _check_table(table, state, policy, on_allow=Outcome.CHANGED_DATABASE)

        case _:
            assert_never(action)
