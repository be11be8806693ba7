"""Gateway: the entry point a host framework calls once per data request.

The host extracts the caller's id, role hint and property bag from its own
transport (headers, tokens) and the requested name/table from its own data
source objects. The gateway turns those strings into an Identity and a
RequestIntent, asks the scoping policy for a Decision and hands it back. It
never executes a query.
"""

from __future__ import annotations

from collections.abc import Mapping

from tenantguard.config import GuardConfig
from tenantguard.decisionlog import log_decision
from tenantguard.decisions import Decision
from tenantguard.identity import Identity, Role
from tenantguard.intents import LiteralQuery, NamedFunctionCall, NamedTableRead, RequestIntent
from tenantguard.registry import ResourceRegistry
from tenantguard.scoping import ScopingPolicy


class Gateway:
    def __init__(self, config: GuardConfig, registry: ResourceRegistry) -> None:
        self.config = config
        self.registry = registry
        self.policy = ScopingPolicy(config, registry)

    @classmethod
    def from_config(cls, config: GuardConfig) -> Gateway:
        return cls(config, config.load_registry())

    def identity(
        self,
        user_id: str,
        role_hint: str | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> Identity:
        """Build an Identity; without a role hint, configured admin ids get Admin."""
        if role_hint is not None:
            role = Role.from_hint(role_hint)
        elif user_id in self.config.admin_ids:
            role = Role.ADMIN
        else:
            role = Role.USER
        return Identity(id=user_id, role=role, properties=properties or {})

    def resolve_intent(
        self,
        name: str,
        *,
        table: str | None = None,
        query: str | None = None,
    ) -> RequestIntent:
        """Map a requested name (and optional table / query source) to an intent."""
        key = name.strip().lower()
        if key in self.config.parameterized_functions or key in self.config.fixed_procedures:
            return NamedFunctionCall(name)
        if query is not None:
            return LiteralQuery(query)
        if key in self.config.literal_queries:
            return LiteralQuery(key)
        return NamedTableRead(table or name)

    def handle(self, identity: Identity, intent: RequestIntent) -> Decision:
        decision = self.policy.decide(identity, intent)
        if self.config.audit_log:
            log_decision(identity, intent, decision)
        return decision

    def dispatch(
        self,
        identity: Identity,
        name: str,
        *,
        table: str | None = None,
        query: str | None = None,
    ) -> Decision:
        return self.handle(identity, self.resolve_intent(name, table=table, query=query))
