"""
RAG contracts — CLI entrypoint.

Usage:
    rag-contracts --help
    rag-contracts graph
    rag-contracts order
    rag-contracts config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from rag_contracts import __version__
from rag_contracts.core.errors import ContractsError
from rag_contracts.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="rag-contracts")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to contracts.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """RAG contracts — the cross-service dependency graph of the RAG platform."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def graph(ctx: click.Context, as_json: bool) -> None:
    """Show builds, envers, producers and consumers."""
    from rag_contracts.core.use_cases.graph import summarize_graph

    result = summarize_graph(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        _fail(result.error)

    registry = result.registry
    assert registry is not None

    if not ctx.obj.get("quiet", False):
        click.secho(f"\n🕸  {registry.name}", fg="cyan", bold=True)
        click.echo(
            f"   {result.build_count} builds, {result.enver_count} envers, "
            f"{result.producer_count} producers, {result.consumer_count} consumers"
        )
        click.echo()

    for build in registry.builds:
        click.secho(f"   {build.build_id}", fg="white", bold=True, nl=False)
        click.echo(f"  [{build.namespace}]")
        for enver in build.envers:
            click.echo(
                f"     • {enver.name}  {enver.account}/{enver.region}  {enver.revision}"
            )
            for producer in enver.producers:
                late = " (wiring-time)" if producer.wiring_time else ""
                click.echo(f"         ▸ {producer.producer_id}{late}")
            for consumer in enver.consumers:
                click.echo(f"         ◂ {consumer.consumer_id} → {consumer.target.address}")

    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def order(ctx: click.Context, as_json: bool) -> None:
    """Show the computed wiring order."""
    from rag_contracts.core.use_cases.graph import build_registry

    try:
        registry = build_registry(ctx.obj.get("config_path"))
    except ContractsError as e:
        _fail(str(e))
        return

    assert registry.plan is not None
    if as_json:
        click.echo(json.dumps(registry.plan.to_dict(), indent=2))
        return

    for i, build in enumerate(registry.plan.order, 1):
        deps = registry.plan.dependencies.get(build.build_id, ())
        after = f"  (after {', '.join(deps)})" if deps else ""
        click.echo(f"{i:>3}. {build.build_id}{after}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--enver", "enver_address", default=None, help="Only edges owned by this enver.")
@click.pass_context
def edges(ctx: click.Context, as_json: bool, enver_address: str | None) -> None:
    """List consumer edges."""
    from rag_contracts.core.use_cases.graph import build_registry

    try:
        registry = build_registry(ctx.obj.get("config_path"))
        if enver_address:
            found = registry.edges_into(registry.get_enver(enver_address))
        else:
            found = registry.edges()
    except ContractsError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in found], indent=2))
        return

    for edge in found:
        extra = ""
        if edge.has_fallback:
            extra += f"  [fallback: {edge.fallback_value}]"
        if edge.propagation.value != "direct":
            extra += "  [no redeploy]"
        click.echo(f"{edge.consumer_address} → {edge.target_address}{extra}")


@cli.group()
def config() -> None:
    """Contracts configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate contracts.yml and the build environment."""
    from rag_contracts.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        assert result.config is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Accounts: {len(result.config.accounts)}")
        click.echo(f"   Repos: {len(result.config.github_repos)}")
        if result.environment:
            click.echo(
                f"   Building in: {result.environment.account}/{result.environment.region}"
            )
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)


@cli.command()
@click.option(
    "--values",
    "values_path",
    type=click.Path(exists=False, dir_okay=False),
    required=True,
    help="JSON file of shared values.",
)
@click.option(
    "--deployed", multiple=True, help="Enver address to treat as deployed (repeatable)."
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(
    ctx: click.Context,
    values_path: str,
    deployed: tuple[str, ...],
    as_json: bool,
) -> None:
    """Resolve every edge against a shared values file."""
    from rag_contracts.core.resolution import ValueOrigin
    from rag_contracts.core.use_cases.resolve import resolve_values

    result = resolve_values(
        Path(values_path),
        deployed=deployed,
        config_path=ctx.obj.get("config_path"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        _fail(result.error)

    colors = {
        ValueOrigin.PRODUCER: "green",
        ValueOrigin.BOOTSTRAP: "cyan",
        ValueOrigin.MASKING: "yellow",
    }
    for value in result.resolved:
        click.echo(f"{value.edge.consumer_address} = {value.value}  ", nl=False)
        click.secho(value.origin.value, fg=colors[value.origin])

    if result.unresolved:
        click.echo()
        click.secho(f"❌ {len(result.unresolved)} unresolved:", fg="red", bold=True)
        for message in result.unresolved:
            click.echo(f"   • {message}")
        sys.exit(1)


@cli.command()
@click.argument("node_address")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def redeploy(ctx: click.Context, node_address: str, as_json: bool) -> None:
    """Envers that redeploy when NODE_ADDRESS publishes a new value."""
    from rag_contracts.core.use_cases.graph import find_redeploy_targets

    result = find_redeploy_targets(node_address, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)
        return

    if result.error:
        _fail(result.error)

    if not result.targets:
        click.echo(f"No envers redeploy when {node_address} changes.")
    for address in result.targets:
        click.echo(f"   • {address}")
    for consumer in result.skipped:
        click.secho(f"   ◦ {consumer} (no redeploy)", fg="bright_black")


# ── Register sub-command groups from rag_contracts/ui/cli/ ───────

from rag_contracts.ui.cli.trust import trust  # noqa: E402
from rag_contracts.ui.cli.values import values  # noqa: E402

cli.add_command(trust)
cli.add_command(values)


if __name__ == "__main__":
    cli()
