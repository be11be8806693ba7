"""The `classify` command: check whether SQL is read-only without executing it."""

from __future__ import annotations

import json

import click

from tenantguard.cli._shared import CONFIG_PATH, OUTPUT_FORMAT, load_guard, resolve_sql_stdin
from tenantguard.diagnostics.render import render_verdict_json, render_verdict_text
from tenantguard.policy import DEFAULT_DIALECT, ReadOnly, classify_sql, describe_tables


@click.command("classify")
@click.argument("sql", required=False)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin.")
@click.option(
    "--dialect", default=DEFAULT_DIALECT, show_default=True,
    help="SQL dialect (postgres, tsql, mysql, etc.)",
)
@click.option(
    "--allow-function", "allowed", multiple=True, metavar="NAME",
    help="User function known to only read (repeatable).",
)
@CONFIG_PATH
@OUTPUT_FORMAT
def classify_cmd(
    sql: str | None,
    from_stdin: bool,
    dialect: str,
    allowed: tuple[str, ...],
    config_path: str | None,
    output_format: str,
) -> None:
    """Classify SQL as read-only, mutating or malformed. Exits 1 unless read-only.

    With --config, the config's allowed_functions also apply and each table
    read is reported as tenant_scoped, registered or unregistered.
    """
    text = resolve_sql_stdin(sql, from_stdin)
    allowed_functions = frozenset(name.lower() for name in allowed)
    config = registry = None
    if config_path is not None:
        config, registry = load_guard(config_path)
        allowed_functions |= config.allowed_functions

    verdict = classify_sql(text, dialect=dialect, allowed_functions=allowed_functions)
    access = None
    if config is not None and isinstance(verdict, ReadOnly):
        access = describe_tables(verdict.tables, registry, config.tenant_column)

    if output_format == "json":
        click.echo(json.dumps(render_verdict_json(text, verdict, access), indent=2))
    else:
        click.echo(render_verdict_text(verdict, access))
    if not verdict.is_read_only:
        raise SystemExit(1)
