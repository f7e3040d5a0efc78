"""Diagnostic system: codes, types and rendering."""

from dbwarden.diagnostics import codes
from dbwarden.diagnostics.codes import DiagnosticCode
from dbwarden.diagnostics.types import (
    Diagnostic,
    Level,
    ScriptResult,
    StatementResult,
)

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Level",
    "ScriptResult",
    "StatementResult",
    "codes",
]
