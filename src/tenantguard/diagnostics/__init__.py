"""Diagnostic system: codes, types and rendering."""

from tenantguard.diagnostics.codes import DiagnosticCode
from tenantguard.diagnostics.types import Diagnostic, Level, Span, SpanLabel

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Level",
    "Span",
    "SpanLabel",
]
