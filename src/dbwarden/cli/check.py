"""The `check` command: compile SQL under the policy without executing it."""

from __future__ import annotations

import click

from dbwarden.cli._output import format_result
from dbwarden.cli._shared import policy_options, resolve_sql_stdin, resolve_target
from dbwarden.database import GuardedDatabase, GuardedDatabaseError


@click.command()
@click.argument("sql", required=False)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin.")
@policy_options
def check(
    sql: str | None,
    from_stdin: bool,
    output_format: str,
    db: str,
    read_only: bool,
    no_access: bool,
    protected_table: str | None,
) -> None:
    """Check whether SQL would be authorized, without running it."""
    sql = resolve_sql_stdin(sql, from_stdin)
    target = resolve_target(
        db, read_only=read_only, no_access=no_access, protected_table=protected_table
    )

    try:
        with GuardedDatabase(target.path, protected_table=target.protected_table) as database:
            result = database.check(sql, permissions=target.permissions)
    except GuardedDatabaseError as e:
        raise click.ClickException(str(e)) from e

    click.echo(format_result(result, output_format=output_format))
    if result.failed:
        raise SystemExit(1)
