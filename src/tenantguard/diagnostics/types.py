"""Diagnostic values produced by the classifier and the scoping engine.

Every check returns Diagnostic values instead of raising. A verdict or a
decision carries the diagnostics that explain it so callers can audit why a
statement was refused.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from tenantguard.diagnostics.codes import DiagnosticCode


class Level(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def slice(self, sql: str) -> str:
        return sql[self.start : self.end]

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @classmethod
    def at_line_col(cls, sql: str, line: int, col: int) -> Span:
        """Build a one-character span from a 1-based line and column."""
        offset = 0
        lines = sql.split("\n")
        for previous in lines[: max(line - 1, 0)]:
            offset += len(previous) + 1
        offset = min(offset + max(col - 1, 0), len(sql))
        return cls(offset, min(offset + 1, len(sql)))


@dataclass
class SpanLabel:
    span: Span
    label: str | None = None


@dataclass
class Diagnostic:
    level: Level
    code: DiagnosticCode
    message: str
    spans: list[SpanLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    line: int | None = None
    col: int | None = None

    # -- Builder classmethods ---------------------------------------------------

    @classmethod
    def error(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message)

    @classmethod
    def warning(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.WARNING, code=code, message=message)

    @classmethod
    def info(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.INFO, code=code, message=message)

    # -- Builder chain methods --------------------------------------------------

    def span(self, span: Span, label: str | None = None) -> Diagnostic:
        self.spans.append(SpanLabel(span=span, label=label))
        return self

    def at(self, line: int, col: int) -> Diagnostic:
        self.line = line
        self.col = col
        return self

    def note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    # -- Query methods ----------------------------------------------------------

    @property
    def is_blocking(self) -> bool:
        return self.level == Level.ERROR

    @property
    def position(self) -> int | None:
        """Character offset of the primary span, if any."""
        if not self.spans:
            return None
        return self.spans[0].span.start
