"""The `exec` command: run untrusted SQL against a guarded database.

Each statement is compiled with the authorizer enabled; a denied reference
aborts the statement before anything runs. With --script, the statements run
in a single transaction that is rolled back on the first failure.
"""

from __future__ import annotations

import click

from dbwarden.authorizer import format_permissions
from dbwarden.cli._output import format_result, format_script_result
from dbwarden.cli._shared import Target, policy_options, resolve_sql_stdin, resolve_target
from dbwarden.database import GuardedDatabase, GuardedDatabaseError
from dbwarden.diagnostics import ScriptResult, StatementResult
from dbwarden.querylog import cleanup_old_logs, log_statement


def _log(result: StatementResult | ScriptResult, target: Target) -> None:
    statements = result.statements if isinstance(result, ScriptResult) else [result]
    for statement in statements:
        log_statement(
            statement, db=target.name, permissions=format_permissions(target.permissions)
        )
    cleanup_old_logs()


@click.command("exec")
@click.argument("sql", required=False)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin.")
@click.option("--script", is_flag=True, help="Run several statements as one transaction.")
@click.option("--no-log", is_flag=True, help="Do not record statements in the query log.")
@policy_options
def exec_cmd(
    sql: str | None,
    from_stdin: bool,
    script: bool,
    no_log: bool,
    output_format: str,
    db: str,
    read_only: bool,
    no_access: bool,
    protected_table: str | None,
) -> None:
    """Execute untrusted SQL under the authorization policy."""
    sql = resolve_sql_stdin(sql, from_stdin)
    target = resolve_target(
        db, read_only=read_only, no_access=no_access, protected_table=protected_table
    )

    try:
        with GuardedDatabase(target.path, protected_table=target.protected_table) as database:
            if script:
                result: StatementResult | ScriptResult = database.execute_script(
                    sql, permissions=target.permissions
                )
            else:
                result = database.execute(sql, permissions=target.permissions)
    except GuardedDatabaseError as e:
        raise click.ClickException(str(e)) from e

    if isinstance(result, ScriptResult):
        click.echo(format_script_result(result, output_format=output_format))
    else:
        click.echo(format_result(result, output_format=output_format))

    if not no_log:
        _log(result, target)
    if result.failed:
        raise SystemExit(1)
