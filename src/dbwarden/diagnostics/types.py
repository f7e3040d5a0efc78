"""Diagnostics for authorization decisions and guarded statement execution.

The authorizer never raises: a denial is a value, recorded as an error-level
Diagnostic. The guarded database collects these per statement and returns
them to the caller together with the outcome flags.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from dbwarden.diagnostics.codes import DiagnosticCode


class Level(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass
class Diagnostic:
    level: Level
    code: DiagnosticCode
    message: str
    notes: list[str] = field(default_factory=list)

    # -- Builder classmethods ---------------------------------------------------

    @classmethod
    def error(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message)

    @classmethod
    def warning(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.WARNING, code=code, message=message)

    # -- Builder chain methods --------------------------------------------------

    def note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    # -- Query methods ----------------------------------------------------------

    @property
    def is_blocking(self) -> bool:
        return self.level == Level.ERROR


@dataclass
class StatementResult:
    """Outcome of one untrusted statement run through the guarded database."""

    sql: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    blocked: bool = False
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, object]] = field(default_factory=list)
    was_insert: bool = False
    changed_database: bool = False
    had_deletes: bool = False
    duration_ms: float | None = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def failed(self) -> bool:
        """Denied, or rejected by SQLite itself."""
        return self.blocked or any(d.is_blocking for d in self.diagnostics)

    @property
    def max_level(self) -> Level | None:
        if not self.diagnostics:
            return None
        return max(d.level for d in self.diagnostics)


@dataclass
class ScriptResult:
    """Outcome of a multi-statement script run as one transaction."""

    statements: list[StatementResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    committed: bool = False

    @property
    def blocked(self) -> bool:
        return any(s.blocked for s in self.statements)

    @property
    def failed(self) -> bool:
        return any(d.is_blocking for d in self.diagnostics) or any(
            s.failed for s in self.statements
        )

    @property
    def changed_database(self) -> bool:
        return self.committed and any(s.changed_database for s in self.statements)

    @property
    def had_deletes(self) -> bool:
        # Delete evidence accumulates across statements; the last one sees it all.
        return self.committed and bool(self.statements) and self.statements[-1].had_deletes
