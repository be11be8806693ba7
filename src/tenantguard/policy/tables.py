"""Tables a read touches, and how each one relates to tenant scoping."""

from __future__ import annotations

import enum
from collections.abc import Iterable

from sqlglot import exp
from sqlglot.optimizer.scope import traverse_scope

from tenantguard.registry import ResourceRegistry


class TableAccess(enum.Enum):
    TENANT_SCOPED = "tenant_scoped"
    REGISTERED = "registered"
    UNREGISTERED = "unregistered"


def extract_tables(statement: exp.Expression) -> list[str]:
    """Physical tables read by a statement, sorted.

    Each scope's sources map aliases to either a Table or a nested Scope
    (CTE, derived table); only Table sources are physical. Schema-qualified
    names keep their schema.
    """
    try:
        scopes = list(traverse_scope(statement))
    except Exception:
        scopes = []

    if not scopes:
        # Scope analysis failed or found nothing: every Table node counts
        return sorted({_qualified_name(t) for t in statement.find_all(exp.Table) if t.name})

    names: set[str] = set()
    for scope in scopes:
        for source in scope.sources.values():
            if isinstance(source, exp.Table) and source.name:
                names.add(_qualified_name(source))
    return sorted(names)


def describe_tables(
    tables: Iterable[str],
    registry: ResourceRegistry,
    tenant_column: str,
) -> dict[str, TableAccess]:
    """Map each table name to its registry status.

    The schema prefix is ignored for the lookup: `public.Orders` is the
    registered `Orders`.
    """
    scoped = {name.lower() for name in registry.resources_with_scoping_column(tenant_column)}
    access: dict[str, TableAccess] = {}
    for table in tables:
        bare = table.rsplit(".", 1)[-1]
        if registry.lookup(bare) is None:
            access[table] = TableAccess.UNREGISTERED
        elif bare.lower() in scoped:
            access[table] = TableAccess.TENANT_SCOPED
        else:
            access[table] = TableAccess.REGISTERED
    return access


def _qualified_name(table: exp.Table) -> str:
    return f"{table.db}.{table.name}" if table.db else table.name
