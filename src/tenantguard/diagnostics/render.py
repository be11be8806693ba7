"""Render verdicts and decisions for terminal (text) and machine (JSON) output."""

from __future__ import annotations

from collections.abc import Mapping

from tenantguard.decisions import Decision, Parameterize, Reject, RewriteQuery
from tenantguard.diagnostics.types import Diagnostic
from tenantguard.policy import ClassificationVerdict, Malformed, Mutating, ReadOnly, TableAccess


def verdict_label(verdict: ClassificationVerdict) -> str:
    if isinstance(verdict, ReadOnly):
        return "read_only"
    if isinstance(verdict, Mutating):
        return "mutating"
    return "malformed"


def _verdict_diagnostics(verdict: ClassificationVerdict) -> tuple[Diagnostic, ...]:
    if isinstance(verdict, Mutating):
        return verdict.diagnostics
    if isinstance(verdict, Malformed):
        return verdict.errors
    return ()


def render_verdict_json(
    sql: str,
    verdict: ClassificationVerdict,
    access: Mapping[str, TableAccess] | None = None,
) -> dict:
    """Render a classification verdict as a JSON-serializable dict.

    With `access`, read-only verdicts also report each table's registry status.
    """
    d: dict = {
        "sql": sql,
        "verdict": verdict_label(verdict),
        "read_only": verdict.is_read_only,
        "diagnostics": [_diagnostic_to_dict(diag) for diag in _verdict_diagnostics(verdict)],
    }
    if isinstance(verdict, ReadOnly):
        d["tables"] = list(verdict.tables)
        if access is not None:
            d["table_access"] = {t: access[t].value for t in verdict.tables if t in access}
    else:
        d["reason"] = verdict.reason
    return d


def render_verdict_text(
    verdict: ClassificationVerdict,
    access: Mapping[str, TableAccess] | None = None,
) -> str:
    """Render a classification verdict as human-readable text."""
    if isinstance(verdict, ReadOnly):
        tables = ", ".join(verdict.tables) or "-"
        lines = [f"read-only (tables: {tables})"]
        if access is not None:
            lines.extend(f"  {t}: {access[t].value}" for t in verdict.tables if t in access)
        return "\n".join(lines)
    lines = [verdict_label(verdict)]
    for d in _verdict_diagnostics(verdict):
        where = f" at {d.line}:{d.col}" if d.line is not None else ""
        lines.append(f"{d.level.name.lower()}[{d.code}]: {d.message}{where}")
        for note in d.notes:
            lines.append(f"  = note: {note}")
    return "\n".join(lines)


def render_decision_json(decision: Decision) -> dict:
    """Render a decision as a JSON-serializable dict."""
    d: dict = {"decision": decision.decision_type}
    if isinstance(decision, Parameterize):
        d["function_name"] = decision.function_name
        d["args"] = dict(decision.args)
    elif isinstance(decision, RewriteQuery):
        d["sql"] = decision.sql
    elif isinstance(decision, Reject):
        d["kind"] = decision.kind.value
        d["code"] = str(decision.code)
        d["reason"] = decision.reason
    return d


def render_decision_text(decision: Decision) -> str:
    """Render a decision as human-readable text."""
    if isinstance(decision, Parameterize):
        args = ", ".join(f"{k}={v!r}" for k, v in decision.args.items())
        return f"parameterize: {decision.function_name}({args})"
    if isinstance(decision, RewriteQuery):
        return f"rewrite: {decision.sql}"
    if isinstance(decision, Reject):
        return f"reject[{decision.code}]: {decision.reason}"
    return "pass-through"


def _diagnostic_to_dict(d: Diagnostic) -> dict:
    return {
        "level": d.level.name.lower(),
        "code": str(d.code),
        "message": d.message,
        "position": d.position,
        "line": d.line,
        "col": d.col,
        "notes": d.notes,
    }
