"""Safety checks: dangerous pattern detection in SQL AST."""

from __future__ import annotations

from sqlglot import exp

from tenantguard.diagnostics import Diagnostic, Span, codes

# Functions that can cause damage even inside a SELECT, per dialect.
DANGEROUS_FUNCTIONS: dict[str, frozenset[str]] = {
    "postgres": frozenset({
        # Process control
        "pg_terminate_backend",
        "pg_cancel_backend",
        "pg_sleep",
        # File system access
        "pg_read_file",
        "pg_read_binary_file",
        "pg_ls_dir",
        # Large object I/O
        "lo_import",
        "lo_export",
        "lo_create",
        "lo_creat",
        "lo_unlink",
        "lo_put",
        "lo_from_bytea",
        "lo_truncate",
        # Advisory locks (can cause deadlocks)
        "pg_advisory_lock",
        "pg_advisory_xact_lock",
        # Config mutation and server control
        "set_config",
        "pg_reload_conf",
        "pg_rotate_logfile",
        "pg_promote",
        # Replication / WAL
        "pg_switch_wal",
        "pg_create_restore_point",
        # Sequences advance on read
        "nextval",
        "setval",
        # Remote execution
        "dblink",
        "dblink_exec",
    }),
    "tsql": frozenset({
        "openrowset",
        "opendatasource",
        "openquery",
        "xp_cmdshell",
    }),
}


def dangerous_functions_for(dialect: str | None) -> frozenset[str]:
    """Blocked function names for a dialect (empty when none are known)."""
    return DANGEROUS_FUNCTIONS.get((dialect or "").lower(), frozenset())


def check_multiple_statements(
    sql: str, statements: list[exp.Expression]
) -> Diagnostic | None:
    """Block SQL containing multiple statements (stacked query injection)."""
    if len(statements) <= 1:
        return None

    semi_pos = sql.find(";")
    if semi_pos == -1:
        semi_pos = len(sql) // 2

    return (
        Diagnostic.error(codes.MULTIPLE_STATEMENTS, "multiple statements detected")
        .span(Span(semi_pos, semi_pos + 1), "second statement starts here")
        .note("only single statements are allowed (possible SQL injection)")
    )


def _function_name(func: exp.Expression) -> str:
    if isinstance(func, exp.Anonymous):
        return func.name
    if hasattr(func, "sql_name"):
        return func.sql_name()
    return func.key


def check_dangerous_functions(
    statement: exp.Expression,
    blocked_functions: frozenset[str],
) -> Diagnostic | None:
    """Block calls to dangerous database-specific system functions."""
    if not blocked_functions:
        return None

    for func in statement.find_all(exp.Anonymous, exp.Func):
        name = _function_name(func)
        if name.lower() in blocked_functions:
            return Diagnostic.error(
                codes.DANGEROUS_FUNCTION,
                f"dangerous function blocked: {name}",
            ).note("this function can cause damage even inside a SELECT")
    return None


def check_unknown_functions(
    statement: exp.Expression,
    allowed_functions: frozenset[str] = frozenset(),
) -> Diagnostic | None:
    """Block calls to functions the parser does not recognize.

    A user-defined function can write (`SELECT purge_orders()`), so any call
    sqlglot parses as `Anonymous` is treated as having unknown effect unless
    its lowercase name is in `allowed_functions`.
    """
    for func in statement.find_all(exp.Anonymous):
        name = func.name
        if name.lower() in allowed_functions:
            continue
        return (
            Diagnostic.error(
                codes.UNKNOWN_FUNCTION,
                f"function call of unknown effect: {name}",
            )
            .note("unrecognized functions may modify data")
            .note("add the name to allowed_functions if it only reads")
        )
    return None


def check_row_lock(statement: exp.Expression) -> Diagnostic | None:
    """Block SELECT ... FOR UPDATE / FOR SHARE (takes row locks)."""
    if statement.find(exp.Lock) is None:
        return None
    return Diagnostic.error(
        codes.ROW_LOCK, "locking clause blocked"
    ).note("FOR UPDATE / FOR SHARE acquire row locks and are not read-only")
