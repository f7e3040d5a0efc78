"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json

from dbwarden.diagnostics.render import (
    render_json,
    render_script_json,
    render_script_text,
    render_text,
)
from dbwarden.diagnostics.types import ScriptResult, StatementResult


def format_result(result: StatementResult, *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(render_json(result), indent=2, default=str)

    lines: list[str] = []
    if result.columns:
        lines.append(" | ".join(result.columns))
        lines.append("-+-".join("-" * max(len(c), 5) for c in result.columns))
        for row in result.rows:
            lines.append(" | ".join(str(row.get(c, "")) for c in result.columns))
        lines.append(f"\n({result.row_count} rows)")
    lines.append(render_text(result))
    return "\n".join(lines)


def format_script_result(result: ScriptResult, *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(render_script_json(result), indent=2, default=str)
    return render_script_text(result)
