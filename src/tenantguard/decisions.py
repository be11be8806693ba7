"""Decisions returned by the scoping engine, and the rejection taxonomy."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar

from tenantguard.diagnostics import DiagnosticCode, codes


class RejectKind(enum.Enum):
    INVALID_IDENTIFIER_FORMAT = "invalid_identifier_format"
    SQL_PARSE_ERROR = "sql_parse_error"
    NON_READ_ONLY_STATEMENT = "non_read_only_statement"
    UNKNOWN_RESOURCE = "unknown_resource"
    POLICY_REJECT = "policy_reject"


_KIND_CODES: dict[RejectKind, DiagnosticCode] = {
    RejectKind.INVALID_IDENTIFIER_FORMAT: codes.INVALID_IDENTIFIER,
    RejectKind.SQL_PARSE_ERROR: codes.SYNTAX_ERROR,
    RejectKind.NON_READ_ONLY_STATEMENT: codes.WRITE_BLOCKED,
    RejectKind.UNKNOWN_RESOURCE: codes.UNKNOWN_RESOURCE,
    RejectKind.POLICY_REJECT: codes.POLICY_REJECT,
}


@dataclass(frozen=True)
class PassThrough:
    """Run the request unchanged."""

    decision_type: ClassVar[str] = "pass_through"


@dataclass(frozen=True)
class Parameterize:
    """Call a function/procedure with bound parameters."""

    function_name: str
    args: Mapping[str, object] = field(default_factory=dict, hash=False)

    decision_type: ClassVar[str] = "parameterize"

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))


@dataclass(frozen=True)
class RewriteQuery:
    """Replace the request with a custom query text."""

    sql: str

    decision_type: ClassVar[str] = "rewrite_query"


@dataclass(frozen=True)
class Reject:
    """Refuse the request; `reason` is meant for audit logs."""

    reason: str
    kind: RejectKind = RejectKind.POLICY_REJECT

    decision_type: ClassVar[str] = "reject"

    @property
    def code(self) -> DiagnosticCode:
        return _KIND_CODES[self.kind]


Decision = PassThrough | Parameterize | RewriteQuery | Reject
