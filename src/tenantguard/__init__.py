"""tenantguard: read-only SQL guard and tenant query scoping."""

from tenantguard.config import DefaultAction, GuardConfig, default_config, load_config
from tenantguard.decisions import (
    Decision,
    Parameterize,
    PassThrough,
    Reject,
    RejectKind,
    RewriteQuery,
)
from tenantguard.gateway import Gateway
from tenantguard.identifiers import validate_customer_id, validate_order_id
from tenantguard.identity import Identity, Role
from tenantguard.intents import LiteralQuery, NamedFunctionCall, NamedTableRead, RequestIntent
from tenantguard.policy import Malformed, Mutating, ReadOnly, classify_sql
from tenantguard.registry import ResourceDescriptor, ResourceRegistry, load_registry
from tenantguard.scoping import ScopingPolicy

__all__ = [
    "Decision",
    "DefaultAction",
    "Gateway",
    "GuardConfig",
    "Identity",
    "LiteralQuery",
    "Malformed",
    "Mutating",
    "NamedFunctionCall",
    "NamedTableRead",
    "Parameterize",
    "PassThrough",
    "ReadOnly",
    "Reject",
    "RejectKind",
    "RequestIntent",
    "ResourceDescriptor",
    "ResourceRegistry",
    "RewriteQuery",
    "Role",
    "ScopingPolicy",
    "classify_sql",
    "default_config",
    "load_config",
    "load_registry",
    "validate_customer_id",
    "validate_order_id",
]
