"""CLI entry point: protodiff.

Subcommands:
    protodiff serve                          # dashboard + periodic scanner
    protodiff scan-once [--json]             # one cycle against the cluster
    protodiff compare live.json registry.json  # offline descriptor comparison
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

import click

from protodiff.core.config import load_settings
from protodiff.core.errors import ProtodiffError
from protodiff.core.logging import setup_logging
from protodiff.engines.drift_scanner.comparator import compare as compare_schemas
from protodiff.engines.drift_scanner.comparator import render_diff, summarize_match
from protodiff.engines.drift_scanner.models import DiffStatus, ScanResult, SchemaDescriptor
from protodiff.engines.drift_scanner.store import ResultStore


def _result_to_json(result: ScanResult) -> dict:
    data = asdict(result)
    data["status"] = result.status.value
    data["last_checked"] = result.last_checked.isoformat()
    return data


def _load_descriptor(path: str) -> SchemaDescriptor:
    try:
        return SchemaDescriptor.from_dict(json.loads(Path(path).read_text()))
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        click.echo(f"Error: {path} is not a schema descriptor: {e}", err=True)
        sys.exit(2)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option("--log-format", type=click.Choice(["console", "json"]), default=None)
def main(verbose: bool, log_format: str | None) -> None:
    """ProtoDiff: detect drift between live gRPC services and the schema registry."""
    setup_logging(
        level="DEBUG" if verbose else None, fmt=log_format, stream="ext://sys.stderr"
    )


@main.command("serve")
def serve() -> None:
    """Run the dashboard and the periodic scanner."""
    import uvicorn

    from protodiff.api import create_app

    settings = load_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.web_host, port=settings.web_port, log_config=None)


@main.command("scan-once")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--fail-on-drift", is_flag=True, help="Exit 1 if any target is MISMATCH")
def scan_once(as_json: bool, fail_on_drift: bool) -> None:
    """Run a single scan cycle and print the results.

    Exits 2 when the cycle cannot run (cluster unreachable, bad kubeconfig).
    """
    from protodiff.api.deps import build_scanner

    settings = load_settings()
    store = ResultStore()

    async def _run() -> None:
        scanner = build_scanner(settings, store)
        try:
            await scanner.run_cycle()
        finally:
            close = getattr(scanner.registry_source, "close", None)
            if close is not None:
                await close()

    try:
        asyncio.run(_run())
    except ProtodiffError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    except Exception as e:
        click.echo(f"Error: scan failed: {type(e).__name__}: {e}", err=True)
        sys.exit(2)
    results = sorted(store.get_all(), key=lambda r: (r.namespace, r.name))

    if as_json:
        click.echo(json.dumps([_result_to_json(r) for r in results], indent=2))
    elif not results:
        click.echo("No targets discovered.")
    else:
        for r in results:
            click.echo(f"{r.status.value:<9} {r.namespace}/{r.name}  {r.message}")

    if fail_on_drift and any(r.status == DiffStatus.MISMATCH for r in results):
        sys.exit(1)


@main.command("compare")
@click.argument("live_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("registry_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the structured diff as JSON")
def compare(live_file: str, registry_file: str, as_json: bool) -> None:
    """Compare two descriptor JSON files; exit 1 on drift."""
    live = _load_descriptor(live_file)
    registry = _load_descriptor(registry_file)
    is_match, diff = compare_schemas(live, registry)

    if as_json:
        click.echo(json.dumps({"match": is_match, "diff": asdict(diff)}, indent=2))
    else:
        click.echo(summarize_match(diff) if is_match else render_diff(diff))
        if diff.extra_in_live:
            click.echo(f"  only live: {', '.join(diff.extra_in_live)}")
        if diff.missing_in_live:
            click.echo(f"  only registry: {', '.join(diff.missing_in_live)}")

    if not is_match:
        sys.exit(1)
