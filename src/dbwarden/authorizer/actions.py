"""One variant per kind of object reference the SQLite compiler authorizes.

`Action` is a closed union: `decide()` matches on it exhaustively, so adding a
variant here without handling it there fails type checking.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CreateTable:
    table: str
    temp: bool = False


@dataclass(frozen=True)
class DropTable:
    table: str
    temp: bool = False


@dataclass(frozen=True)
class AlterTable:
    database: str
    table: str


@dataclass(frozen=True)
class CreateIndex:
    index: str
    table: str
    temp: bool = False


@dataclass(frozen=True)
class DropIndex:
    index: str
    table: str
    temp: bool = False


@dataclass(frozen=True)
class CreateTrigger:
    trigger: str
    table: str
    temp: bool = False


@dataclass(frozen=True)
class DropTrigger:
    trigger: str
    table: str
    temp: bool = False


@dataclass(frozen=True)
class CreateView:
    view: str
    temp: bool = False


@dataclass(frozen=True)
class DropView:
    view: str
    temp: bool = False


@dataclass(frozen=True)
class CreateVirtualTable:
    table: str
    module: str


@dataclass(frozen=True)
class DropVirtualTable:
    table: str
    module: str


@dataclass(frozen=True)
class Delete:
    table: str


@dataclass(frozen=True)
class Insert:
    table: str


@dataclass(frozen=True)
class Update:
    table: str
    column: str


@dataclass(frozen=True)
class Transaction:
    operation: str = ""  # BEGIN, COMMIT or ROLLBACK


@dataclass(frozen=True)
class Select:
    pass


@dataclass(frozen=True)
class Read:
    table: str
    column: str


@dataclass(frozen=True)
class Reindex:
    index: str


@dataclass(frozen=True)
class Analyze:
    table: str


@dataclass(frozen=True)
class Pragma:
    name: str
    argument: str = ""


@dataclass(frozen=True)
class Attach:
    filename: str


@dataclass(frozen=True)
class Detach:
    database: str


@dataclass(frozen=True)
class Function:
    name: str


Action = (
    CreateTable
    | DropTable
    | AlterTable
    | CreateIndex
    | DropIndex
    | CreateTrigger
    | DropTrigger
    | CreateView
    | DropView
    | CreateVirtualTable
    | DropVirtualTable
    | Delete
    | Insert
    | Update
    | Transaction
    | Select
    | Read
    | Reindex
    | Analyze
    | Pragma
    | Attach
    | Detach
    | Function
)


def describe(action: Action) -> str:
    """Short human-readable form used in denial diagnostics and logs."""
    kind = type(action).__name__
    fields = [str(v) for v in vars(action).values() if isinstance(v, str) and v]
    if getattr(action, "temp", False):
        kind = f"{kind} (temp)"
    return f"{kind} {' '.join(fields)}".rstrip()
