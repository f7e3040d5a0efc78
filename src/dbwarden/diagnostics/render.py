"""Render statement outcomes for terminal (text) and agent (JSON) output."""

from __future__ import annotations

from dbwarden.diagnostics.types import Diagnostic, ScriptResult, StatementResult


def render_json(result: StatementResult) -> dict:
    """Render a StatementResult as a JSON-serializable dict."""
    d: dict = {
        "sql": result.sql,
        "decision": _decision(result.blocked, result.failed),
        "blocked": result.blocked,
        "outcome": _outcome(result),
        "diagnostics": [_diagnostic_to_dict(diag) for diag in result.diagnostics],
    }
    if result.columns:
        d["columns"] = result.columns
        d["rows"] = result.rows
        d["row_count"] = result.row_count
    if result.duration_ms is not None:
        d["duration_ms"] = result.duration_ms
    return d


def render_script_json(result: ScriptResult) -> dict:
    return {
        "decision": _decision(result.blocked, result.failed),
        "blocked": result.blocked,
        "committed": result.committed,
        "changed_database": result.changed_database,
        "had_deletes": result.had_deletes,
        "diagnostics": [_diagnostic_to_dict(diag) for diag in result.diagnostics],
        "statements": [render_json(s) for s in result.statements],
    }


def render_text(result: StatementResult) -> str:
    """Render a StatementResult's diagnostics and outcome as human-readable text."""
    lines = render_diagnostics(result.diagnostics)
    flags = [name for name, value in _outcome(result).items() if value]
    lines.append(f"outcome: {', '.join(flags) if flags else 'no changes'}")
    return "\n".join(lines)


def render_script_text(result: ScriptResult) -> str:
    lines: list[str] = []
    for i, statement in enumerate(result.statements, start=1):
        lines.append(f"[{i}] {statement.sql}")
        lines.extend(f"  {line}" for line in render_diagnostics(statement.diagnostics))
    lines.extend(render_diagnostics(result.diagnostics))
    status = "committed" if result.committed else "not committed"
    changes = []
    if result.changed_database:
        changes.append("changed_database")
    if result.had_deletes:
        changes.append("had_deletes")
    lines.append(f"script {status}: {', '.join(changes) if changes else 'no changes'}")
    return "\n".join(lines)


def render_diagnostics(diagnostics: list[Diagnostic]) -> list[str]:
    lines: list[str] = []
    for d in diagnostics:
        lines.append(f"{d.level.name.lower()}[{d.code}]: {d.message}")
        for note in d.notes:
            lines.append(f"  = note: {note}")
    return lines


def _outcome(result: StatementResult) -> dict[str, bool]:
    return {
        "was_insert": result.was_insert,
        "changed_database": result.changed_database,
        "had_deletes": result.had_deletes,
    }


def _diagnostic_to_dict(d: Diagnostic) -> dict:
    return {
        "level": d.level.name.lower(),
        "code": str(d.code),
        "message": d.message,
        "notes": d.notes,
    }


def _decision(blocked: bool, failed: bool) -> str:
    if blocked:
        return "deny"
    return "error" if failed else "allow"
