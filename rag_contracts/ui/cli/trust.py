"""
CLI commands for hierarchical trust.

Usage::

    rag-contracts trust check embedding/processor-366920167720-us-east-2 \\
        --pattern 'embedding/*' --account 366920167720
    rag-contracts trust grants
"""

from __future__ import annotations

import json
import sys

import click

from rag_contracts.core.errors import ContractsError


@click.group()
def trust() -> None:
    """Trust — identity names and wildcard grants."""


@trust.command("check")
@click.argument("identity")
@click.option("--pattern", required=True, help="Trust pattern, e.g. 'embedding/*'.")
@click.option("--account", required=True, help="Account the pattern is scoped to.")
@click.option("--region", default=None, help="Region the pattern is scoped to.")
@click.option("--graph", "with_graph", is_flag=True, help="Also list nodes granting this identity.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(
    ctx: click.Context,
    identity: str,
    pattern: str,
    account: str,
    region: str | None,
    with_graph: bool,
    as_json: bool,
) -> None:
    """Check whether a trust pattern admits IDENTITY."""
    from rag_contracts.core.use_cases.graph import build_registry
    from rag_contracts.core.use_cases.trust_check import check_trust

    registry = None
    if with_graph:
        try:
            registry = build_registry(ctx.obj.get("config_path"))
        except ContractsError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)

    result = check_trust(identity, pattern, account, region, registry=registry)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.allowed else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if result.allowed:
        click.secho(f"✅ {identity} matches {result.pattern}", fg="green")
    else:
        click.secho(f"✗ {identity} does not match {result.pattern}", fg="yellow")

    for address in result.granted_nodes:
        click.echo(f"   • {address}")

    if not result.allowed:
        sys.exit(1)


@trust.command("grants")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def grants(ctx: click.Context, as_json: bool) -> None:
    """List every trust grant in the graph."""
    from rag_contracts.core.use_cases.graph import build_registry

    try:
        registry = build_registry(ctx.obj.get("config_path"))
    except ContractsError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    found = registry.trust_grants()
    if as_json:
        click.echo(json.dumps([g.to_dict() for g in found], indent=2))
        return

    for grant in found:
        click.echo(f"{grant.node.address}  ← {grant.pattern.scoped}")
