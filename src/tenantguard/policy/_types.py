"""Internal types for the SQL classifier."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from tenantguard.diagnostics import Diagnostic


class StatementType(enum.Enum):
    READ = "read"
    DML = "dml"
    DDL = "ddl"
    ADMIN = "admin"      # GRANT, COPY, EXEC, CALL, etc.
    UNKNOWN = "unknown"  # Anything we can't classify → blocked


@dataclass(frozen=True)
class ReadOnly:
    tables: tuple[str, ...] = ()

    @property
    def is_read_only(self) -> bool:
        return True


@dataclass(frozen=True)
class Mutating:
    reason: str
    diagnostics: tuple[Diagnostic, ...] = field(default=(), compare=False)

    @property
    def is_read_only(self) -> bool:
        return False


@dataclass(frozen=True)
class Malformed:
    errors: tuple[Diagnostic, ...]

    @property
    def is_read_only(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        if not self.errors:
            return "SQL syntax error"
        return f"SQL syntax error: {self.errors[0].message}"


ClassificationVerdict = ReadOnly | Mutating | Malformed
