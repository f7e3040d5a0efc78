"""Named database profiles stored in ~/.dbwarden/profiles.toml."""

from __future__ import annotations

import os
import stat
import tomllib
from dataclasses import dataclass
from pathlib import Path

from dbwarden.authorizer import (
    DEFAULT_PROTECTED_TABLE,
    Permission,
    format_permissions,
    parse_permissions,
)

_PROFILES_FILE = Path.home() / ".dbwarden" / "profiles.toml"


class ProfileError(Exception):
    """Raised for malformed profile entries."""


@dataclass
class Profile:
    name: str
    path: str
    protected_table: str = DEFAULT_PROTECTED_TABLE
    permissions: Permission = Permission.READ_WRITE


def _escape_toml_value(v: str) -> str:
    """Escape a string for safe inclusion in a TOML double-quoted value."""
    return v.replace("\\", "\\\\").replace('"', '\\"')


def _write_toml(data: dict[str, dict]) -> None:
    """Serialize profiles dict to TOML and write with restricted permissions."""
    lines: list[str] = []
    for profile_name, entry in data.items():
        lines.append(f'["{_escape_toml_value(profile_name)}"]')
        for k, v in entry.items():
            lines.append(f'{k} = "{_escape_toml_value(str(v))}"')
        lines.append("")

    _PROFILES_FILE.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    _PROFILES_FILE.write_text("\n".join(lines))
    os.chmod(_PROFILES_FILE, stat.S_IRUSR | stat.S_IWUSR)  # 0600


def _load_file() -> dict:
    if not _PROFILES_FILE.exists():
        return {}
    return tomllib.loads(_PROFILES_FILE.read_text())


def list_profiles() -> dict[str, dict]:
    """Return all named profiles as {name: {path, protected_table, permissions}}."""
    return _load_file()


def get_profile(name: str) -> Profile | None:
    """Look up a named profile. Returns None if not found."""
    data = _load_file()
    if name not in data:
        return None

    entry = data[name]
    path = entry.get("path")
    if not path:
        raise ProfileError(f"profile '{name}' has no path")

    try:
        permissions = parse_permissions(entry.get("permissions", "read-write"))
    except ValueError as e:
        raise ProfileError(f"profile '{name}': {e}") from e

    return Profile(
        name=name,
        path=str(path),
        protected_table=str(entry.get("protected_table", DEFAULT_PROTECTED_TABLE)),
        permissions=permissions,
    )


def save_profile(profile: Profile) -> Path:
    """Save a named profile to the config file."""
    data = _load_file()
    data[profile.name] = {
        "path": profile.path,
        "protected_table": profile.protected_table,
        "permissions": format_permissions(profile.permissions),
    }
    _write_toml(data)
    return _PROFILES_FILE


def remove_profile(name: str) -> bool:
    """Remove a named profile. Returns True if removed, False if not found."""
    data = _load_file()
    if name not in data:
        return False
    del data[name]
    if not data:
        _PROFILES_FILE.unlink(missing_ok=True)
    else:
        _write_toml(data)
    return True
