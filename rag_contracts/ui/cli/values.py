"""
CLI commands for the local shared values file.

Usage::

    rag-contracts values publish ragEmbedding/dev/embedding-storage/embeddings-bucket emb-dev
    rag-contracts values deployed ragEmbedding/dev
    rag-contracts values show --json
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from rag_contracts.core.errors import ContractsError
from rag_contracts.core.persistence.values_file import (
    DEFAULT_VALUES_FILE,
    SharedValuesDocument,
    load_values,
    save_values,
)

_file_option = click.option(
    "--file",
    "values_path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_VALUES_FILE,
    show_default=True,
    help="JSON file of shared values.",
)


def _load_for_update(path: Path) -> SharedValuesDocument:
    try:
        return load_values(path, strict=True)
    except ContractsError as e:
        click.secho(f"❌ {e}", fg="red")
        click.echo("   Fix or remove the file before writing to it.")
        sys.exit(1)


@click.group()
def values() -> None:
    """Values — the local stand-in for deployed producer values."""


@values.command("publish")
@click.argument("node_address")
@click.argument("value")
@click.option("--check/--no-check", default=True, help="Require the node to exist in the graph.")
@_file_option
@click.pass_context
def publish(
    ctx: click.Context,
    node_address: str,
    value: str,
    check: bool,
    values_path: str,
) -> None:
    """Publish VALUE at NODE_ADDRESS, marking its enver deployed."""
    from rag_contracts.core.use_cases.graph import build_registry

    enver_address = "/".join(node_address.split("/", 2)[:2])
    if check:
        try:
            node = build_registry(ctx.obj.get("config_path")).get_node(node_address)
        except ContractsError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)
        enver_address = node.owner.address

    path = Path(values_path)
    doc = _load_for_update(path)
    doc.publish(node_address, value)
    doc.mark_deployed(enver_address)
    save_values(doc, path)
    click.secho(f"✅ {node_address} = {value}", fg="green")


@values.command("deployed")
@click.argument("enver_address")
@_file_option
def deployed(enver_address: str, values_path: str) -> None:
    """Mark ENVER_ADDRESS deployed without publishing a value."""
    path = Path(values_path)
    doc = _load_for_update(path)
    doc.mark_deployed(enver_address)
    save_values(doc, path)
    click.secho(f"✅ {enver_address} marked deployed", fg="green")


@values.command("show")
@_file_option
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def show(values_path: str, as_json: bool) -> None:
    """Show the values file."""
    doc = load_values(Path(values_path))

    if as_json:
        click.echo(json.dumps(doc.model_dump(mode="json"), indent=2))
        return

    for address, value in sorted(doc.values.items()):
        click.echo(f"{address} = {value}")
    if doc.deployed:
        click.echo()
        click.secho("Deployed:", bold=True)
        for address in doc.deployed:
            click.echo(f"   • {address}")
