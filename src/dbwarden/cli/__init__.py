"""CLI entry point."""

from __future__ import annotations

import logging

import click

from dbwarden.cli.check import check
from dbwarden.cli.exec import exec_cmd
from dbwarden.cli.profile import profile


@click.group()
@click.version_option(package_name="dbwarden")
@click.option("-v", "--verbose", is_flag=True, help="Log authorization decisions to stderr.")
def main(verbose: bool) -> None:
    """dbwarden: per-statement authorization for untrusted SQLite SQL."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


main.add_command(check)
main.add_command(exec_cmd)
main.add_command(profile)
