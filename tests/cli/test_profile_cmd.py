"""CLI tests for profile management."""

from __future__ import annotations

from click.testing import CliRunner

from dbwarden.authorizer import Permission
from dbwarden.cli import main
from dbwarden.profiles import get_profile


def test_add_and_list() -> None:
    runner = CliRunner()
    result = runner.invoke(main, [
        "profile", "add", "notes", "/data/notes.db", "--permissions", "read-only",
    ])
    assert result.exit_code == 0
    assert "Saved profile 'notes'" in result.output

    profile = get_profile("notes")
    assert profile is not None
    assert profile.permissions == Permission.READ_ONLY

    result = runner.invoke(main, ["profile", "list"])
    assert "notes (/data/notes.db)" in result.output
    assert "permissions=read-only" in result.output


def test_list_empty() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["profile", "list"])
    assert result.exit_code == 0
    assert "No profiles configured." in result.output


def test_add_bad_permissions() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["profile", "add", "x", "x.db", "--permissions", "admin"])
    assert result.exit_code == 2
    assert get_profile("x") is None


def test_remove() -> None:
    runner = CliRunner()
    runner.invoke(main, ["profile", "add", "notes", "notes.db"])
    result = runner.invoke(main, ["profile", "remove", "notes"])
    assert result.exit_code == 0
    assert "Removed profile 'notes'." in result.output
    assert get_profile("notes") is None


def test_remove_missing() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["profile", "remove", "ghost"])
    assert result.exit_code == 1
    assert "not found" in result.output
