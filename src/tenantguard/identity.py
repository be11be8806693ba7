"""Caller identity as handed over by the host after header/token extraction."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class Role(enum.Enum):
    USER = "User"
    ADMIN = "Admin"

    @classmethod
    def from_hint(cls, hint: str | None) -> Role:
        """Map a role hint to a Role; anything but "admin" is a plain user."""
        if hint is not None and hint.strip().lower() == "admin":
            return cls.ADMIN
        return cls.USER


@dataclass(frozen=True)
class Identity:
    id: str
    role: Role = Role.USER
    properties: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def get_property(self, name: str) -> str | None:
        """Look up a property, falling back to a case-insensitive match."""
        if name in self.properties:
            return self.properties[name]
        lowered = name.lower()
        for key, value in self.properties.items():
            if key.lower() == lowered:
                return value
        return None
