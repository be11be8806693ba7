"""Classify SQL statements by type (READ, DML, DDL, ADMIN, UNKNOWN)."""

from __future__ import annotations

from sqlglot import exp

from tenantguard.policy._types import StatementType

_READ_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except, exp.Subquery)
_DML_TYPES = (exp.Insert, exp.Update, exp.Delete, exp.Merge)
_DDL_TYPES = (exp.Create, exp.Drop, exp.Alter, exp.TruncateTable)

# Statements that are always blocked (privilege escalation, data movement,
# EXEC/CALL and anything sqlglot could only keep as a raw command).
_BLOCKED_TYPES = (exp.Grant, exp.Copy, exp.Command)

# Nodes allowed in a statement made only of literals and bind parameters.
_VALUE_TYPES = (
    exp.Literal,
    exp.Placeholder,
    exp.Parameter,
    exp.Null,
    exp.Boolean,
    exp.Neg,
    exp.Paren,
    exp.Tuple,
)


def _has_dml_in_cte(statement: exp.Expression) -> bool:
    """Check if any CTE contains a DML operation (writable CTE)."""
    return any(
        isinstance(cte.this, _DML_TYPES)
        for cte in statement.find_all(exp.CTE)
    )


def _has_into(statement: exp.Expression) -> bool:
    """Check for SELECT INTO (creates a table despite being a SELECT)."""
    return statement.find(exp.Into) is not None


def _nested_write(statement: exp.Expression) -> StatementType | None:
    """Return the kind of the first data-modifying node nested in a read."""
    for node in statement.walk():
        if node is statement:
            continue
        if isinstance(node, _BLOCKED_TYPES):
            return StatementType.ADMIN
        if isinstance(node, _DML_TYPES):
            return StatementType.DML
        if isinstance(node, _DDL_TYPES):
            return StatementType.DDL
    return None


def _is_value_only(statement: exp.Expression) -> bool:
    """True for statements like `SELECT`-less `1` or `?` that touch no data."""
    for node in statement.walk():
        if isinstance(node, _VALUE_TYPES):
            continue
        # Parameter names ($1, :name) hang below the Parameter/Placeholder node.
        if isinstance(node.parent, (exp.Parameter, exp.Placeholder)):
            continue
        return False
    return True


def classify(statement: exp.Expression) -> StatementType:
    """Classify a parsed SQL statement.

    Security-critical: anything we can't positively identify as a safe READ
    is classified as DML, DDL, ADMIN or UNKNOWN (all blocked).

    Catches:
    - Writable CTEs: WITH d AS (DELETE ...) SELECT * FROM d
    - SELECT INTO: SELECT * INTO new_table FROM t (creates table)
    - GRANT/COPY/Command (EXEC, CALL, DO): always ADMIN
    - TruncateTable: classified as DDL
    - Write nodes nested anywhere below a read
    - Unknown statements (BEGIN, SET, PREPARE): UNKNOWN
    """
    if isinstance(statement, _BLOCKED_TYPES):
        return StatementType.ADMIN
    if isinstance(statement, _READ_TYPES):
        if _has_dml_in_cte(statement):
            return StatementType.DML
        if _has_into(statement):
            return StatementType.DDL
        nested = _nested_write(statement)
        if nested is not None:
            return nested
        return StatementType.READ
    if isinstance(statement, _DML_TYPES):
        return StatementType.DML
    if isinstance(statement, _DDL_TYPES):
        return StatementType.DDL
    if _is_value_only(statement):
        return StatementType.READ
    return StatementType.UNKNOWN
