"""dbwarden: per-statement SQL authorization for SQLite connections."""

from dbwarden.authorizer import (
    DatabaseAuthorizer,
    FunctionAllowlist,
    Outcome,
    Permission,
    Verdict,
)
from dbwarden.database import GuardedDatabase, GuardedDatabaseError

__all__ = [
    "DatabaseAuthorizer",
    "FunctionAllowlist",
    "GuardedDatabase",
    "GuardedDatabaseError",
    "Outcome",
    "Permission",
    "Verdict",
]
