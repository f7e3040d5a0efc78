"""Mutable per-connection state: permission mode, master switch, outcome flags."""

from __future__ import annotations

from dataclasses import dataclass

from dbwarden.authorizer._types import Outcome, Permission


@dataclass
class AuthorizerState:
    enabled: bool = False
    permissions: Permission = Permission.READ_WRITE
    was_insert: bool = False
    changed_database: bool = False
    had_deletes: bool = False

    def apply(self, effects: Outcome) -> None:
        """Record the side effects of one decision. Flags are only ever set here."""
        if Outcome.WAS_INSERT in effects:
            self.was_insert = True
        if Outcome.CHANGED_DATABASE in effects:
            self.changed_database = True
        if Outcome.HAD_DELETES in effects:
            self.had_deletes = True

    def reset(self) -> None:
        # `enabled` and `had_deletes` have their own lifecycles.
        self.was_insert = False
        self.changed_database = False
        self.permissions = Permission.READ_WRITE

    def reset_deletes(self) -> None:
        self.had_deletes = False
