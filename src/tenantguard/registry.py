"""Allowed-resource registry: which tables take part in tenant scoping.

Loaded once at startup, immutable afterwards, shared by every request.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

_TABLE_KEYS = ("table", "TABLE_NAME")
_COLUMN_KEYS = ("column", "COLUMN_NAME")


class RegistryError(ValueError):
    """Raised when a registry source is not a list of {table, column} entries."""


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    scoping_column: str | None = None


class ResourceRegistry:
    """Read-only lookup over resource descriptors (case-insensitive names)."""

    def __init__(self, resources: Iterable[ResourceDescriptor] = ()) -> None:
        by_name: dict[str, ResourceDescriptor] = {}
        for resource in resources:
            # First entry wins for duplicate names.
            by_name.setdefault(resource.name.lower(), resource)
        self._resources = tuple(by_name.values())
        self._by_name = MappingProxyType(by_name)

    def __iter__(self):
        return iter(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_name

    def lookup(self, name: str) -> ResourceDescriptor | None:
        return self._by_name.get(name.lower())

    def resources_with_scoping_column(self, column_name: str) -> frozenset[str]:
        """Names of resources scoped by the given column (column compared case-insensitively)."""
        wanted = column_name.lower()
        return frozenset(
            r.name
            for r in self._resources
            if r.scoping_column is not None and r.scoping_column.lower() == wanted
        )


def _first(entry: Mapping, keys: tuple[str, ...]) -> object | None:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def load_registry(source: Iterable[Mapping[str, object]]) -> ResourceRegistry:
    """Build a registry from {table, column} mappings.

    Accepts `table`/`column` keys as well as the `TABLE_NAME`/`COLUMN_NAME`
    keys of an information_schema export.
    """
    resources: list[ResourceDescriptor] = []
    for i, entry in enumerate(source):
        if not isinstance(entry, Mapping):
            raise RegistryError(f"registry entry {i} is not a mapping")
        table = _first(entry, _TABLE_KEYS)
        if not isinstance(table, str) or not table.strip():
            raise RegistryError(f"registry entry {i} has no table name")
        column = _first(entry, _COLUMN_KEYS)
        if column is not None and not isinstance(column, str):
            raise RegistryError(f"registry entry {i} has a non-string column")
        resources.append(
            ResourceDescriptor(name=table.strip(), scoping_column=column.strip() if column else None)
        )
    return ResourceRegistry(resources)


def load_registry_file(path: str | Path) -> ResourceRegistry:
    """Load a registry from a JSON array or a TOML file with [[resources]] tables."""
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig")
    if path.suffix == ".toml":
        try:
            data = tomllib.loads(text).get("resources", [])
        except tomllib.TOMLDecodeError as e:
            raise RegistryError(f"{path}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise RegistryError(f"{path}: {e}") from e
    if not isinstance(data, list):
        raise RegistryError(f"{path}: expected a list of resources")
    return load_registry(data)
