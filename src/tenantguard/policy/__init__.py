"""Read-only SQL classifier: parse, classify, guard, return a verdict."""

from __future__ import annotations

import sqlglot
from sqlglot import exp

from tenantguard.diagnostics import Diagnostic, Span, codes
from tenantguard.policy._types import (
    ClassificationVerdict,
    Malformed,
    Mutating,
    ReadOnly,
    StatementType,
)
from tenantguard.policy.classify import classify
from tenantguard.policy.safety import (
    check_dangerous_functions,
    check_multiple_statements,
    check_row_lock,
    check_unknown_functions,
    dangerous_functions_for,
)
from tenantguard.policy.tables import TableAccess, describe_tables, extract_tables

DEFAULT_DIALECT = "postgres"

_BLOCKED_MESSAGES = {
    StatementType.DML: (codes.WRITE_BLOCKED, "write operation blocked"),
    StatementType.DDL: (codes.DDL_BLOCKED, "DDL operation blocked"),
    StatementType.ADMIN: (codes.ADMIN_BLOCKED, "admin operation blocked"),
    StatementType.UNKNOWN: (codes.UNKNOWN_BLOCKED, "unrecognized statement blocked"),
}

__all__ = [
    "ClassificationVerdict",
    "Malformed",
    "Mutating",
    "ReadOnly",
    "StatementType",
    "TableAccess",
    "classify",
    "classify_sql",
    "describe_tables",
    "extract_tables",
]


def _syntax_errors(sql: str, error: sqlglot.errors.SqlglotError) -> tuple[Diagnostic, ...]:
    """Turn a sqlglot error into ordered, positioned diagnostics."""
    details = getattr(error, "errors", None) or []
    diagnostics: list[Diagnostic] = []
    for detail in details:
        diag = Diagnostic.error(
            codes.SYNTAX_ERROR, detail.get("description") or str(error)
        )
        line, col = detail.get("line"), detail.get("col")
        if line is not None and col is not None:
            diag.at(line, col).span(Span.at_line_col(sql, line, col), "here")
        diagnostics.append(diag)
    if not diagnostics:
        diagnostics.append(Diagnostic.error(codes.SYNTAX_ERROR, str(error)))
    return tuple(diagnostics)


def _is_comment_only(statement: exp.Expression) -> bool:
    """A comment after the final `;` parses as a bare semicolon node."""
    return statement.key == "semicolon"


def _mutating(diag: Diagnostic) -> Mutating:
    return Mutating(reason=diag.message, diagnostics=(diag,))


def classify_sql(
    sql: str,
    *,
    dialect: str | None = DEFAULT_DIALECT,
    blocked_functions: frozenset[str] | None = None,
    allowed_functions: frozenset[str] = frozenset(),
) -> ClassificationVerdict:
    """Decide whether a SQL text only reads.

    Steps:
        1. Parse into statements (parse failure -> Malformed)
        2. Reject batches of more than one statement (stacked queries)
        3. Classify the statement by node kind
        4. Walk reads for row locks, dangerous functions and unrecognized functions

    Args:
        sql: Raw SQL text.
        dialect: sqlglot dialect used for parsing.
        blocked_functions: Function names refused even inside a SELECT.
            None uses the dialect's built-in blocklist.
        allowed_functions: Lowercase names of user functions known to only read.
            The blocklist still wins for names on both lists.

    Returns:
        ReadOnly, Mutating or Malformed. Never raises for bad SQL.
    """
    if blocked_functions is None:
        blocked_functions = dangerous_functions_for(dialect)

    try:
        parsed = sqlglot.parse(sql or "", read=dialect)
    except sqlglot.errors.SqlglotError as e:
        return Malformed(errors=_syntax_errors(sql or "", e))

    # Filter out empty expressions (trailing semicolons, trailing comments)
    statements: list[exp.Expression] = [
        s for s in parsed if s is not None and not _is_comment_only(s)
    ]
    if not statements:
        return ReadOnly()

    multi_diag = check_multiple_statements(sql, statements)
    if multi_diag is not None:
        return _mutating(multi_diag)

    statement = statements[0]
    stmt_type = classify(statement)
    if stmt_type != StatementType.READ:
        code, message = _BLOCKED_MESSAGES[stmt_type]
        return _mutating(
            Diagnostic.error(code, message).note(f"statement classified as {stmt_type.value}")
        )

    for diag in (
        check_row_lock(statement),
        check_dangerous_functions(statement, blocked_functions),
        check_unknown_functions(statement, allowed_functions),
    ):
        if diag is not None:
            return _mutating(diag)

    return ReadOnly(tables=tuple(extract_tables(statement)))
