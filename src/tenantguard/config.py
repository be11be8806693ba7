"""Guard configuration: built in code or loaded from a TOML file.

Example file:

    dialect = "postgres"
    tenant_column = "customerId"
    default_action = "reject"
    admin_ids = ["AROUT", "BLONP"]
    registry_file = "allowedtables.json"
    allowed_functions = ["order_total"]

    [functions.parameterized]
    custorders = "customer_id"

    [functions.fixed]
    tenmostexpensiveproducts = "ten most expensive products"

    [literal_queries.customerorders]
    table = "orders"
    column = "orderId"
    property = "OrderId"
    validator = "order_id"

    [[resources]]
    table = "Orders"
    column = "CustomerID"
"""

from __future__ import annotations

import enum
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from tenantguard.identifiers import VALIDATORS
from tenantguard.policy import DEFAULT_DIALECT
from tenantguard.registry import ResourceRegistry, load_registry, load_registry_file

CONFIG_ENV_VAR = "TENANTGUARD_CONFIG"


class ConfigError(ValueError):
    """Raised for malformed or inconsistent configuration."""


class DefaultAction(enum.Enum):
    PASS_THROUGH = "pass_through"
    REJECT = "reject"


@dataclass(frozen=True)
class LiteralQueryTemplate:
    """`SELECT * FROM <table> WHERE <column> = '<identity property>'`."""

    table: str
    column: str
    property: str
    validator: str = "customer_id"


def _frozen(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class GuardConfig:
    dialect: str = DEFAULT_DIALECT
    tenant_column: str = "customerId"
    default_action: DefaultAction = DefaultAction.PASS_THROUGH
    admin_ids: frozenset[str] = frozenset()
    allow_free_form_sql: bool = False
    audit_log: bool = False
    # user functions (lowercase) that only read; any other unrecognized call is mutating
    allowed_functions: frozenset[str] = frozenset()
    # request name (lowercase) -> bound parameter name carrying the tenant id
    parameterized_functions: Mapping[str, str] = field(default_factory=dict, hash=False)
    # request name (lowercase) -> function/procedure name to call
    fixed_procedures: Mapping[str, str] = field(default_factory=dict, hash=False)
    literal_queries: Mapping[str, LiteralQueryTemplate] = field(default_factory=dict, hash=False)
    resources: tuple[Mapping[str, str], ...] = field(default=(), hash=False)
    registry_file: Path | None = None

    def __post_init__(self) -> None:
        for name in ("parameterized_functions", "fixed_procedures", "literal_queries"):
            lowered = {k.lower(): v for k, v in dict(getattr(self, name)).items()}
            object.__setattr__(self, name, _frozen(lowered))
        object.__setattr__(
            self, "allowed_functions", frozenset(n.lower() for n in self.allowed_functions)
        )
        for name, template in self.literal_queries.items():
            if template.validator not in VALIDATORS:
                raise ConfigError(
                    f"literal query '{name}': unknown validator '{template.validator}'"
                    f" (valid: {', '.join(sorted(VALIDATORS))})"
                )

    def load_registry(self) -> ResourceRegistry:
        """Inline [[resources]] first, then entries from registry_file."""
        entries: list[Mapping[str, str]] = list(self.resources)
        if self.registry_file is not None:
            entries.extend(
                {"table": r.name, "column": r.scoping_column}
                for r in load_registry_file(self.registry_file)
            )
        return load_registry(entries)


def default_config() -> GuardConfig:
    """The sample policy: Northwind-style procedures and an orders lookup."""
    return GuardConfig(
        admin_ids=frozenset({"AROUT", "BLONP"}),
        parameterized_functions={
            "custorderhist": "customer_id",
            "custorders": "customer_id",
            "custordersdates": "customer_id",
        },
        fixed_procedures={"tenmostexpensiveproducts": "ten most expensive products"},
        literal_queries={
            "customerorders": LiteralQueryTemplate(
                table="orders", column="orderId", property="OrderId", validator="order_id"
            ),
        },
    )


def _expect(value: object, kind: type, key: str) -> object:
    if not isinstance(value, kind):
        raise ConfigError(f"'{key}' must be of type {kind.__name__}")
    return value


def _parse_templates(data: Mapping) -> dict[str, LiteralQueryTemplate]:
    templates: dict[str, LiteralQueryTemplate] = {}
    for name, entry in data.items():
        _expect(entry, dict, f"literal_queries.{name}")
        try:
            templates[name] = LiteralQueryTemplate(
                table=entry["table"],
                column=entry["column"],
                property=entry["property"],
                validator=entry.get("validator", "customer_id"),
            )
        except KeyError as e:
            raise ConfigError(f"literal_queries.{name}: missing key {e}") from e
    return templates


def config_from_dict(data: Mapping, *, base_dir: Path | None = None) -> GuardConfig:
    """Build a GuardConfig from parsed TOML data."""
    try:
        default_action = DefaultAction(data.get("default_action", "pass_through"))
    except ValueError as e:
        valid = ", ".join(a.value for a in DefaultAction)
        raise ConfigError(f"unknown default_action (valid: {valid})") from e

    functions = _expect(data.get("functions", {}), dict, "functions")
    registry_file = data.get("registry_file")
    if registry_file is not None:
        registry_file = Path(_expect(registry_file, str, "registry_file"))
        if base_dir is not None and not registry_file.is_absolute():
            registry_file = base_dir / registry_file

    return GuardConfig(
        dialect=_expect(data.get("dialect", DEFAULT_DIALECT), str, "dialect"),
        tenant_column=_expect(data.get("tenant_column", "customerId"), str, "tenant_column"),
        default_action=default_action,
        admin_ids=frozenset(_expect(data.get("admin_ids", []), list, "admin_ids")),
        allow_free_form_sql=_expect(
            data.get("allow_free_form_sql", False), bool, "allow_free_form_sql"
        ),
        audit_log=_expect(data.get("audit_log", False), bool, "audit_log"),
        allowed_functions=frozenset(
            _expect(data.get("allowed_functions", []), list, "allowed_functions")
        ),
        parameterized_functions=_expect(
            functions.get("parameterized", {}), dict, "functions.parameterized"
        ),
        fixed_procedures=_expect(functions.get("fixed", {}), dict, "functions.fixed"),
        literal_queries=_parse_templates(
            _expect(data.get("literal_queries", {}), dict, "literal_queries")
        ),
        resources=tuple(_expect(data.get("resources", []), list, "resources")),
        registry_file=registry_file,
    )


def load_config(path: str | Path | None = None) -> GuardConfig:
    """Load config from a TOML file, $TENANTGUARD_CONFIG, or the built-in default."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if path is None:
        return default_config()

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    return config_from_dict(data, base_dir=path.parent)
