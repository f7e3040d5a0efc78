"""Internal types for the authorization engine."""

from __future__ import annotations

import enum
import sqlite3


class Verdict(enum.IntEnum):
    """Answer returned to the SQLite compiler for one referenced object."""

    ALLOW = sqlite3.SQLITE_OK
    DENY = sqlite3.SQLITE_DENY
    IGNORE = sqlite3.SQLITE_IGNORE  # reserved, never produced by the engine


class Permission(enum.IntFlag):
    READ_WRITE = 0
    READ_ONLY = 1 << 1
    NO_ACCESS = 1 << 2


class Outcome(enum.Flag):
    """Side effects a decision records on the connection state."""

    NONE = 0
    WAS_INSERT = enum.auto()
    CHANGED_DATABASE = enum.auto()
    HAD_DELETES = enum.auto()


_PERMISSION_NAMES = {
    Permission.READ_WRITE: "read-write",
    Permission.READ_ONLY: "read-only",
    Permission.NO_ACCESS: "no-access",
}


def parse_permissions(text: str) -> Permission:
    """Parse `read-only`, `no-access`, `read-only,no-access`, ... into flags."""
    result = Permission.READ_WRITE
    for part in text.split(","):
        name = part.strip().lower().replace("_", "-")
        matches = [p for p, label in _PERMISSION_NAMES.items() if label == name]
        if not matches:
            valid = ", ".join(_PERMISSION_NAMES.values())
            raise ValueError(f"unknown permission '{part.strip()}' (valid: {valid})")
        result |= matches[0]
    return result


def format_permissions(permissions: Permission) -> str:
    if not permissions:
        return _PERMISSION_NAMES[Permission.READ_WRITE]
    return ",".join(
        label for p, label in _PERMISSION_NAMES.items() if p and p in permissions
    )
