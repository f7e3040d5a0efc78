"""The `profile` command group: manage named databases (~/.dbwarden/profiles.toml)."""

from __future__ import annotations

import click

from dbwarden.authorizer import DEFAULT_PROTECTED_TABLE, parse_permissions
from dbwarden.profiles import Profile, list_profiles, remove_profile, save_profile


@click.group()
def profile() -> None:
    """Manage named databases (~/.dbwarden/profiles.toml)."""


@profile.command("add")
@click.argument("name")
@click.argument("path")
@click.option(
    "--protected-table",
    default=DEFAULT_PROTECTED_TABLE,
    show_default=True,
    help="Reserved metadata table that untrusted SQL may never name.",
)
@click.option(
    "--permissions",
    default="read-write",
    show_default=True,
    help="read-write, read-only, no-access, or a comma-separated combination.",
)
def profile_add(name: str, path: str, protected_table: str, permissions: str) -> None:
    """Add a named database.

    \b
    Examples:
      dbwarden profile add notes ~/notes.db
      dbwarden profile add archive /data/archive.db --permissions read-only
    """
    try:
        parsed = parse_permissions(permissions)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'--permissions'") from e

    saved = save_profile(
        Profile(name=name, path=path, protected_table=protected_table, permissions=parsed)
    )
    click.echo(f"Saved profile '{name}' to {saved}")


@profile.command("list")
def profile_list() -> None:
    """List all named databases."""
    profiles = list_profiles()
    if not profiles:
        click.echo("No profiles configured.")
        click.echo("Add one: dbwarden profile add <name> <path>")
        return

    for name, entry in profiles.items():
        path = entry.get("path", "?")
        details = ", ".join(f"{k}={v}" for k, v in entry.items() if k != "path")
        click.echo(f"  {name} ({path}): {details}")


@profile.command("remove")
@click.argument("name")
def profile_remove(name: str) -> None:
    """Remove a named database."""
    if not remove_profile(name):
        click.echo(f"Profile '{name}' not found.", err=True)
        raise SystemExit(1)
    click.echo(f"Removed profile '{name}'.")
