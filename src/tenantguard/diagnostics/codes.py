"""Stable, searchable error code registry.

Ranges:
- Q0001  General (syntax errors)
- Q02xx  Safety checks
- Q03xx  Classification / access control
- Q07xx  Tenant scoping (identifiers, resources, roles)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagnosticCode:
    value: int

    def __str__(self) -> str:
        return f"Q{self.value:04d}"


# General
SYNTAX_ERROR = DiagnosticCode(1)

# Safety checks (Q02xx)
MULTIPLE_STATEMENTS = DiagnosticCode(202)
DANGEROUS_FUNCTION = DiagnosticCode(206)
ROW_LOCK = DiagnosticCode(207)
UNKNOWN_FUNCTION = DiagnosticCode(208)

# Classification / access control (Q03xx)
WRITE_BLOCKED = DiagnosticCode(301)
DDL_BLOCKED = DiagnosticCode(302)
ADMIN_BLOCKED = DiagnosticCode(303)
UNKNOWN_BLOCKED = DiagnosticCode(304)

# Tenant scoping (Q07xx)
INVALID_IDENTIFIER = DiagnosticCode(701)
UNKNOWN_RESOURCE = DiagnosticCode(702)
POLICY_REJECT = DiagnosticCode(703)
