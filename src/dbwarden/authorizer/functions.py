"""Built-in SQL functions that untrusted statements may call."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def ascii_lower(value: str) -> str:
    """Lower-case A-Z only. Non-ASCII characters are left untouched."""
    return value.translate(_ASCII_LOWER)


def equal_ignoring_case(a: str, b: str) -> bool:
    return ascii_lower(a) == ascii_lower(b)


DEFAULT_FUNCTIONS: tuple[str, ...] = (
    # Helpers SQLite calls internally while running ALTER TABLE.
    "sqlite_rename_table",
    "sqlite_rename_trigger",
    # Core functions
    "abs",
    "changes",
    "coalesce",
    "glob",
    "ifnull",
    "hex",
    "last_insert_rowid",
    "length",
    "like",
    "lower",
    "ltrim",
    "max",
    "min",
    "nullif",
    "quote",
    "replace",
    "round",
    "rtrim",
    "soundex",
    "sqlite_source_id",
    "sqlite_version",
    "substr",
    "total_changes",
    "trim",
    "typeof",
    "upper",
    "zeroblob",
    # Date and time
    "date",
    "time",
    "datetime",
    "julianday",
    "strftime",
    # Aggregates (max/min listed above)
    "avg",
    "count",
    "group_concat",
    "sum",
    "total",
    # Full-text search
    "match",
    "snippet",
    "offsets",
    "optimize",
    # ICU collation helpers (like/lower/upper listed above)
    "regexp",
)


class FunctionAllowlist:
    """Immutable, ASCII case-insensitive set of permitted function names."""

    __slots__ = ("_names",)

    def __init__(self, extra: Iterable[str] = ()) -> None:
        names = {ascii_lower(n) for n in DEFAULT_FUNCTIONS}
        names.update(ascii_lower(n) for n in extra)
        self._names: frozenset[str] = frozenset(names)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return ascii_lower(name) in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"FunctionAllowlist({len(self._names)} names)"
