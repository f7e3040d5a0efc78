"""Shared helpers for check and exec commands."""

from __future__ import annotations

import sys
from dataclasses import dataclass

import click

from dbwarden.authorizer import DEFAULT_PROTECTED_TABLE, Permission
from dbwarden.profiles import ProfileError, get_profile


@dataclass
class Target:
    """Where untrusted SQL runs and under which policy."""

    name: str
    path: str
    protected_table: str
    permissions: Permission


def resolve_sql_stdin(sql: str | None, from_stdin: bool) -> str:
    """Resolve SQL from positional argument or stdin. Exactly one source required."""
    if sql and from_stdin:
        raise click.UsageError("Provide SQL as an argument or --from-stdin, not both.")
    if from_stdin:
        if sys.stdin.isatty():
            raise click.UsageError("--from-stdin requires piped input (stdin is a terminal).")
        text = sys.stdin.read().strip()
        if not text:
            raise click.UsageError("--from-stdin: stdin was empty.")
        return text
    if not sql:
        raise click.UsageError("Missing argument 'SQL'. Provide SQL or use --from-stdin.")
    return sql


def resolve_target(
    db: str,
    *,
    read_only: bool,
    no_access: bool,
    protected_table: str | None,
) -> Target:
    """Resolve --db: a named profile first, otherwise a database file path.

    Permission flags from the command line add to the profile's own.
    """
    try:
        profile = get_profile(db)
    except ProfileError as e:
        raise click.BadParameter(str(e), param_hint="'--db'") from e

    if profile is not None:
        target = Target(
            name=profile.name,
            path=profile.path,
            protected_table=profile.protected_table,
            permissions=profile.permissions,
        )
    else:
        target = Target(
            name=db,
            path=db,
            protected_table=DEFAULT_PROTECTED_TABLE,
            permissions=Permission.READ_WRITE,
        )

    if protected_table:
        target.protected_table = protected_table
    if read_only:
        target.permissions |= Permission.READ_ONLY
    if no_access:
        target.permissions |= Permission.NO_ACCESS
    return target


def policy_options(f):
    """Options shared by every command that runs untrusted SQL."""
    f = click.option(
        "--protected-table",
        default=None,
        help=f"Reserved metadata table name (default {DEFAULT_PROTECTED_TABLE}).",
    )(f)
    f = click.option("--no-access", is_flag=True, help="Deny reads as well as writes.")(f)
    f = click.option("--read-only", is_flag=True, help="Deny writes.")(f)
    f = click.option(
        "--db", required=True, help="Profile name or SQLite database path (:memory: allowed)."
    )(f)
    f = click.option(
        "--format",
        "output_format",
        type=click.Choice(["json", "text"]),
        default="text",
        help="Output format.",
    )(f)
    return f
