"""The `registry` command: list the resources taking part in tenant scoping."""

from __future__ import annotations

import click

from tenantguard.cli._shared import CONFIG_PATH, load_guard


@click.command()
@click.option("--column", default=None, help="Only resources scoped by this column.")
@CONFIG_PATH
def registry(column: str | None, config_path: str | None) -> None:
    """List registered resources and their scoping columns."""
    config, reg = load_guard(config_path)
    if len(reg) == 0:
        click.echo("No resources registered.")
        click.echo("Add [[resources]] entries or registry_file to the config.")
        return

    wanted = reg.resources_with_scoping_column(column) if column else None
    for resource in reg:
        if wanted is not None and resource.name not in wanted:
            continue
        scoped = resource.scoping_column or "-"
        is_tenant = (resource.scoping_column or "").lower() == config.tenant_column.lower()
        marker = " (tenant)" if is_tenant else ""
        click.echo(f"{resource.name}  {scoped}{marker}")
