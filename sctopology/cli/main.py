"""Click commands for inspecting and serving the configured topology."""

from __future__ import annotations

import json
from pathlib import Path

import click

from sctopology import __version__
from sctopology.app import build_topology
from sctopology.config import load_config
from sctopology.errors import ResourceNotFoundError, TopologyError
from sctopology.hosting import Topology, render_manifest, resolve_environment
from sctopology.models.config import SCTopologyConfig
from sctopology.observability.logging import setup_logging


def _build(config: SCTopologyConfig) -> Topology:
    try:
        return build_topology(config)
    except TopologyError as exc:
        raise click.ClickException(f"cannot build topology: {exc}") from exc


@click.group()
@click.version_option(version=__version__, prog_name="sctopology")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Build the ServiceControl topology from SCTOPOLOGY_* environment variables."""
    try:
        config = load_config()
    except TopologyError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config.log.level, config.log.format)
    ctx.obj = config


@cli.command()
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write to FILE instead of stdout.")
@click.pass_obj
def manifest(config: SCTopologyConfig, output: Path | None) -> None:
    """Print the deployment manifest as JSON."""
    text = json.dumps(render_manifest(_build(config)), indent=2)
    if output is None:
        click.echo(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    click.echo(f"manifest written to {output}", err=True)


@cli.command()
@click.argument("resource")
@click.option("--show-secrets", is_flag=True, help="Print secret parameter values instead of ***.")
@click.pass_obj
def env(config: SCTopologyConfig, resource: str, show_secrets: bool) -> None:
    """Print the resolved environment of RESOURCE as KEY=VALUE lines."""
    topology = _build(config)
    try:
        values = resolve_environment(topology, resource, redact=not show_secrets)
    except ResourceNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    for key, value in values.items():
        click.echo(f"{key}={value}")


@cli.command()
@click.pass_obj
def resources(config: SCTopologyConfig) -> None:
    """List resources with their type and display parent."""
    for resource in _build(config).resources:
        parent = resource.parent or "-"
        click.echo(f"{resource.name}\t{resource.kind.value}\t{parent}")


@cli.command()
@click.option("--host", default=None, help="Bind address (default: SCTOPOLOGY_API_HOST).")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Port (default: SCTOPOLOGY_API_PORT).")
@click.pass_obj
def serve(config: SCTopologyConfig, host: str | None, port: int | None) -> None:
    """Serve the read-only topology API."""
    import uvicorn

    from sctopology.api import create_app

    app = create_app(topology=_build(config), config=config)
    uvicorn.run(
        app,
        host=host or config.api.host,
        port=port or config.api.port,
        log_config=None,  # structlog handles all logging
        access_log=False,
    )
