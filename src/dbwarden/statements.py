"""Split untrusted scripts into single statements."""

from __future__ import annotations

import sqlglot
from sqlglot.tokens import Token, TokenType

DIALECT = "sqlite"


class StatementSplitError(Exception):
    """Raised when a script cannot be tokenized."""


def _is_trigger_keyword(token: Token) -> bool:
    return (
        token.token_type not in (TokenType.STRING, TokenType.IDENTIFIER)
        and token.text.upper() == "TRIGGER"
    )


def split_statements(sql: str) -> list[str]:
    """Return each statement of a script as its own SQL string.

    Statements are slices of the caller's text: sqlglot only finds the
    semicolons that end them, so the authorizer sees exactly what was
    written. Empty statements (stray or trailing semicolons) are dropped.
    Semicolons inside a trigger's BEGIN ... END body do not end it.
    """
    try:
        tokens = sqlglot.tokenize(sql, read=DIALECT)
    except sqlglot.errors.SqlglotError as e:
        raise StatementSplitError(f"SQL syntax error: {e}") from e

    statements: list[str] = []
    current: list[Token] = []
    chunk_start = 0
    in_trigger = False
    depth = 0
    for token in tokens:
        kind = token.token_type
        if kind == TokenType.SEMICOLON and depth == 0:
            if current:
                statements.append(sql[chunk_start : token.start].strip())
            current, in_trigger = [], False
            chunk_start = token.end + 1
            continue

        current.append(token)
        if not in_trigger:
            in_trigger = current[0].token_type == TokenType.CREATE and _is_trigger_keyword(token)
        elif kind in (TokenType.BEGIN, TokenType.CASE):
            depth += 1
        elif kind == TokenType.END and depth:
            depth -= 1

    if current:
        statements.append(sql[chunk_start:].strip())
    return statements
