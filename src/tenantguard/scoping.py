"""Scoping policy engine: (identity, intent) -> decision.

Cases, checked in order:
    1. Function calls that take the tenant id as a bound parameter
    2. Function calls to fixed procedures (no tenant argument)
    3. Literal queries built from a configured template
    4. Free-form literal SQL (admins only, when enabled)
    5. Reads of tenant-scoped tables (admins bypass scoping)
    6. Registered tables outside tenant scoping: pass through
    7. Unregistered tables and unknown functions: the configured default action

Policy outcomes are always returned as a Decision, never raised.
"""

from __future__ import annotations

from typing import assert_never

from tenantguard.config import DefaultAction, GuardConfig, LiteralQueryTemplate
from tenantguard.decisions import (
    Decision,
    Parameterize,
    PassThrough,
    Reject,
    RejectKind,
    RewriteQuery,
)
from tenantguard.identifiers import (
    VALIDATORS,
    escape_sql_literal,
    quote_identifier,
    validate_customer_id,
)
from tenantguard.identity import Identity
from tenantguard.intents import LiteralQuery, NamedFunctionCall, NamedTableRead, RequestIntent
from tenantguard.policy import ClassificationVerdict, Malformed, ReadOnly, classify_sql
from tenantguard.registry import ResourceRegistry

INVALID_IDENTIFIER = "invalid identifier format"


def build_scoped_query(table: str, column: str, value: str, *, quote_table: bool = False) -> str:
    """`SELECT * FROM <table> WHERE <column> = '<value>'` with the value escaped."""
    source = quote_identifier(table) if quote_table else table
    return f"SELECT * FROM {source} WHERE {column} = '{escape_sql_literal(value)}'"


def _invalid_identifier() -> Reject:
    return Reject(INVALID_IDENTIFIER, RejectKind.INVALID_IDENTIFIER_FORMAT)


def verdict_to_reject(verdict: ClassificationVerdict) -> Reject:
    """Map a non-ReadOnly verdict onto the rejection taxonomy."""
    if isinstance(verdict, Malformed):
        return Reject(verdict.reason, RejectKind.SQL_PARSE_ERROR)
    return Reject(verdict.reason, RejectKind.NON_READ_ONLY_STATEMENT)


class ScopingPolicy:
    """Apply one fixed policy shape: read-only enforcement + single-column tenant scoping."""

    def __init__(self, config: GuardConfig, registry: ResourceRegistry) -> None:
        self.config = config
        self.registry = registry
        self._scoped_tables = {
            name.lower() for name in registry.resources_with_scoping_column(config.tenant_column)
        }

    def is_tenant_scoped(self, table: str) -> bool:
        return table.lower() in self._scoped_tables

    def decide(self, identity: Identity, intent: RequestIntent) -> Decision:
        if isinstance(intent, NamedFunctionCall):
            return self._function_call(identity, intent)
        if isinstance(intent, LiteralQuery):
            return self._literal_query(identity, intent)
        if isinstance(intent, NamedTableRead):
            return self._table_read(identity, intent)
        assert_never(intent)

    # -- cases ------------------------------------------------------------------

    def _function_call(self, identity: Identity, intent: NamedFunctionCall) -> Decision:
        name = intent.name.lower()

        param = self.config.parameterized_functions.get(name)
        if param is not None:
            if not validate_customer_id(identity.id):
                return _invalid_identifier()
            return Parameterize(name, {param: identity.id})

        function_name = self.config.fixed_procedures.get(name)
        if function_name is not None:
            return Parameterize(function_name, {})

        return self._default(intent.name)

    def _literal_query(self, identity: Identity, intent: LiteralQuery) -> Decision:
        template = self.config.literal_queries.get(intent.source.strip().lower())
        if template is not None:
            return self._templated_query(identity, template)

        if not self.config.allow_free_form_sql:
            return Reject(
                "free-form SQL is disabled", RejectKind.POLICY_REJECT
            )
        if not identity.is_admin:
            return Reject(
                "free-form SQL requires the Admin role", RejectKind.POLICY_REJECT
            )
        return self._checked_rewrite(intent.source)

    def _templated_query(self, identity: Identity, template: LiteralQueryTemplate) -> Decision:
        value = identity.get_property(template.property)
        if not VALIDATORS[template.validator](value):
            return _invalid_identifier()
        return self._checked_rewrite(build_scoped_query(template.table, template.column, value))

    def _table_read(self, identity: Identity, intent: NamedTableRead) -> Decision:
        resource = self.registry.lookup(intent.table)
        if resource is None:
            return self._default(intent.table)
        # Registered but scoped by another column (or none): nothing to scope
        if not self.is_tenant_scoped(resource.name):
            return PassThrough()

        if identity.is_admin:
            return PassThrough()

        if not validate_customer_id(identity.id):
            return _invalid_identifier()

        query = build_scoped_query(
            resource.name, self.config.tenant_column, identity.id, quote_table=True
        )
        return self._checked_rewrite(query)

    # -- helpers ----------------------------------------------------------------

    def _checked_rewrite(self, sql: str) -> Decision:
        verdict = classify_sql(
            sql,
            dialect=self.config.dialect,
            allowed_functions=self.config.allowed_functions,
        )
        if isinstance(verdict, ReadOnly):
            return RewriteQuery(sql)
        return verdict_to_reject(verdict)

    def _default(self, name: str) -> Decision:
        if self.config.default_action == DefaultAction.REJECT:
            return Reject(f"unknown resource: {name}", RejectKind.UNKNOWN_RESOURCE)
        return PassThrough()
