"""What the caller asks for, before any policy is applied."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class NamedFunctionCall:
    name: str
    args: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))


@dataclass(frozen=True)
class NamedTableRead:
    table: str


@dataclass(frozen=True)
class LiteralQuery:
    """A literal query: a configured template name or free-form SQL text."""

    source: str


RequestIntent = NamedFunctionCall | NamedTableRead | LiteralQuery
