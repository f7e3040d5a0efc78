"""Stable, searchable error code registry.

Ranges:
- A0001      General (syntax errors)
- A01xx      Access control (why the authorizer denied a reference)
- A02xx      Statement execution
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagnosticCode:
    value: int

    def __str__(self) -> str:
        return f"A{self.value:04d}"


# General
SYNTAX_ERROR = DiagnosticCode(1)

# Access control (A01xx)
WRITE_BLOCKED = DiagnosticCode(101)
READ_BLOCKED = DiagnosticCode(102)
PROTECTED_TABLE = DiagnosticCode(103)
MODULE_NOT_ALLOWED = DiagnosticCode(104)
FUNCTION_NOT_ALLOWED = DiagnosticCode(105)
TRANSACTION_BLOCKED = DiagnosticCode(106)
PRAGMA_BLOCKED = DiagnosticCode(107)
ATTACH_BLOCKED = DiagnosticCode(108)
UNKNOWN_ACTION = DiagnosticCode(109)

# Statement execution (A02xx)
STATEMENT_DENIED = DiagnosticCode(201)
EXECUTION_ERROR = DiagnosticCode(202)
