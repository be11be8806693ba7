"""CLI entry point."""

from __future__ import annotations

import click

from tenantguard.cli.classify import classify_cmd
from tenantguard.cli.decide import decide
from tenantguard.cli.registry import registry


@click.group()
@click.version_option(package_name="tenantguard")
def main() -> None:
    """tenantguard: read-only SQL guard and tenant query scoping."""


main.add_command(classify_cmd)
main.add_command(decide)
main.add_command(registry)
