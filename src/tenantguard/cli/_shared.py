"""Shared helpers for CLI commands."""

from __future__ import annotations

import sys

import click

from tenantguard.config import ConfigError, GuardConfig, load_config
from tenantguard.registry import RegistryError, ResourceRegistry


def resolve_sql_stdin(sql: str | None, from_stdin: bool) -> str:
    """Resolve SQL from positional argument or stdin. Exactly one source required."""
    if sql and from_stdin:
        raise click.UsageError("Provide SQL as an argument or --from-stdin, not both.")
    if from_stdin:
        if sys.stdin.isatty():
            raise click.UsageError("--from-stdin requires piped input (stdin is a terminal).")
        text = sys.stdin.read().strip()
        if not text:
            raise click.UsageError("--from-stdin: stdin was empty.")
        return text
    if sql is None:
        raise click.UsageError("Missing argument 'SQL'. Provide SQL or use --from-stdin.")
    return sql


def parse_properties(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated --prop KEY=VALUE options."""
    props: dict[str, str] = {}
    for value in values:
        if "=" not in value:
            raise click.BadParameter(
                f"Expected KEY=VALUE, got '{value}'", param_hint="'--prop'"
            )
        k, v = value.split("=", 1)
        props[k.strip()] = v
    return props


def load_guard(config_path: str | None) -> tuple[GuardConfig, ResourceRegistry]:
    """Load config and registry, turning file errors into CLI errors."""
    try:
        config = load_config(config_path)
        return config, config.load_registry()
    except (ConfigError, RegistryError, OSError) as e:
        raise click.ClickException(str(e)) from e


OUTPUT_FORMAT = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)

CONFIG_PATH = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML config file (default: $TENANTGUARD_CONFIG or the built-in sample policy).",
)
