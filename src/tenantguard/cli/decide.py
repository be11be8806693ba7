"""The `decide` command: run one request through the scoping policy."""

from __future__ import annotations

import json

import click

from tenantguard.cli._shared import CONFIG_PATH, OUTPUT_FORMAT, load_guard, parse_properties
from tenantguard.decisionlog import cleanup_old_logs
from tenantguard.decisions import Reject
from tenantguard.diagnostics.render import render_decision_json, render_decision_text
from tenantguard.gateway import Gateway


@click.command()
@click.argument("user_id")
@click.argument("name")
@click.option("--role", default=None, help="Role hint (Admin or User). Default: from admin_ids.")
@click.option("--table", default=None, help="Requested table, when it differs from NAME.")
@click.option("--query", default=None, help="Free-form literal SQL.")
@click.option("--prop", "props", multiple=True, help="Identity property KEY=VALUE (repeatable).")
@CONFIG_PATH
@OUTPUT_FORMAT
def decide(
    user_id: str,
    name: str,
    role: str | None,
    table: str | None,
    query: str | None,
    props: tuple[str, ...],
    config_path: str | None,
    output_format: str,
) -> None:
    """Decide how the request NAME by USER_ID may run. Exits 1 on reject.

    \b
    Examples:
      tenantguard decide ALFKI Orders
      tenantguard decide ALFKI custorders
      tenantguard decide ALFKI customerorders --prop OrderId=10248
    """
    config, registry = load_guard(config_path)
    gateway = Gateway(config, registry)
    identity = gateway.identity(user_id, role, parse_properties(props))
    decision = gateway.dispatch(identity, name, table=table, query=query)
    if config.audit_log:
        cleanup_old_logs()

    if output_format == "json":
        click.echo(json.dumps(render_decision_json(decision), indent=2))
    else:
        click.echo(render_decision_text(decision))
    if isinstance(decision, Reject):
        raise SystemExit(1)
