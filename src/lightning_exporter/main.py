"""
Lightning exporter entry point.

Usage:
    lightning-exporter --lnd.macaroon-path readonly.macaroon    Serve metrics
    lightning-exporter --mock                                   Serve simulated node metrics
    lightning-exporter --mock snapshot                          Print one snapshot and exit

Every option can also be set through the environment variable named
in its help text.
"""

from __future__ import annotations

import logging

import click
from prometheus_client import CollectorRegistry
from prometheus_client.gc_collector import GCCollector
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector

from lightning_exporter import __version__
from lightning_exporter.client.base import LightningStub
from lightning_exporter.client.lightning import LightningClient
from lightning_exporter.client.rest_stub import LndRestStub
from lightning_exporter.collector.lightning_collector import LightningCollector
from lightning_exporter.config import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRICS_PATH,
    DEFAULT_NAMESPACE,
    DEFAULT_RPC_HOST,
    DEFAULT_RPC_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TLS_CERT_PATH,
    ExporterConfig,
)
from lightning_exporter.errors import ConfigurationError, ConstructionError, RemoteError
from lightning_exporter.mock.generator import MockLightningNode
from lightning_exporter.server import serve


log = logging.getLogger("lightning_exporter")


def build_stub(config: ExporterConfig, mock: bool) -> LightningStub:
    if mock:
        return MockLightningNode()
    return LndRestStub(
        base_url=config.rpc_url,
        tls_cert_path=config.tls_cert_path,
        macaroon_path=config.macaroon_path or None,
        timeout_seconds=config.timeout_seconds,
    )


def build_registry(client: LightningClient, config: ExporterConfig) -> CollectorRegistry:
    registry = CollectorRegistry()
    registry.register(LightningCollector(client, namespace=config.namespace))

    if config.process_metrics:
        # Fresh instances; the module-level ones are bound to the default registry
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)

    return registry


def _connect(ctx) -> LightningClient:
    config: ExporterConfig = ctx.obj["config"]

    try:
        config.validate()
        stub = build_stub(config, ctx.obj["mock"])
    except ConfigurationError as exc:
        log.error("Invalid configuration: %s", exc)
        raise SystemExit(1)

    try:
        return LightningClient(stub)
    except ConstructionError as exc:
        stub.close()
        log.error("Could not create Lightning RPC client: %s", exc)
        raise SystemExit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="lightning-exporter")
@click.option("--namespace", "namespace", envvar="NAMESPACE", default=DEFAULT_NAMESPACE,
              show_default=True, help="Prefix for exported metric names. Env: NAMESPACE")
@click.option("--web.listen-address", "listen_address", envvar="LISTEN_ADDRESS",
              default=DEFAULT_LISTEN_ADDRESS, show_default=True,
              help="Address to serve metrics on. Env: LISTEN_ADDRESS")
@click.option("--web.telemetry-path", "metrics_path", envvar="TELEMETRY_PATH",
              default=DEFAULT_METRICS_PATH, show_default=True,
              help="Path under which to expose metrics. Env: TELEMETRY_PATH")
@click.option("--rpc.host", "rpc_host", envvar="RPC_HOST", default=DEFAULT_RPC_HOST,
              show_default=True, help="Lightning node host. Env: RPC_HOST")
@click.option("--rpc.port", "rpc_port", envvar="RPC_PORT", default=DEFAULT_RPC_PORT, type=int,
              show_default=True, help="Lightning node REST port. Env: RPC_PORT")
@click.option("--rpc.timeout", "timeout_seconds", envvar="RPC_TIMEOUT",
              default=DEFAULT_TIMEOUT_SECONDS, type=float, show_default=True,
              help="Per-request timeout in seconds. Env: RPC_TIMEOUT")
@click.option("--lnd.tls-cert-path", "tls_cert_path", envvar="TLS_CERT_PATH",
              default=DEFAULT_TLS_CERT_PATH, show_default=True,
              help="Path to lnd's tls.cert. Env: TLS_CERT_PATH")
@click.option("--lnd.macaroon-path", "macaroon_path", envvar="MACAROON_PATH", default="",
              help="Path to a read-only macaroon. Env: MACAROON_PATH")
@click.option("--process-metrics", "process_metrics", envvar=["PROCESS_METRICS", "GO_METRICS"],
              is_flag=True, default=False,
              help="Also export process, platform and GC metrics. Env: PROCESS_METRICS or GO_METRICS")
@click.option("--mock", is_flag=True, default=False, help="Use a simulated node instead of lnd")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, namespace: str, listen_address: str, metrics_path: str, rpc_host: str,
        rpc_port: int, timeout_seconds: float, tls_cert_path: str, macaroon_path: str,
        process_metrics: bool, mock: bool, verbose: bool):
    """Lightning exporter - lnd metrics for Prometheus."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["mock"] = mock
    ctx.obj["config"] = ExporterConfig(
        namespace=namespace,
        listen_address=listen_address,
        metrics_path=metrics_path,
        rpc_host=rpc_host,
        rpc_port=rpc_port,
        tls_cert_path=tls_cert_path,
        macaroon_path=macaroon_path,
        process_metrics=process_metrics,
        timeout_seconds=timeout_seconds,
    )

    # No subcommand: run the exporter
    if ctx.invoked_subcommand is None:
        config: ExporterConfig = ctx.obj["config"]
        log.info("Starting Lightning Prometheus Exporter version=%s", __version__)

        client = _connect(ctx)
        try:
            host, port = config.listen_host_port()
            serve(build_registry(client, config), host, port, config.metrics_path)
        except ConfigurationError as exc:
            log.error("Invalid configuration: %s", exc)
            raise SystemExit(1)
        finally:
            client.close()


@cli.command()
@click.pass_context
def snapshot(ctx):
    """Fetch a single snapshot from the node and print it."""
    from rich.console import Console
    from rich.table import Table

    client = _connect(ctx)
    try:
        snap = client.fetch_snapshot()
    except RemoteError as exc:
        log.error("Error getting stats: %s", exc)
        raise SystemExit(1)
    finally:
        client.close()

    console = Console()
    table = Table(title=f"Lightning node state ({client.name()})", show_header=True,
                  header_style="bold")
    table.add_column("Field")
    table.add_column("Value", justify="right")

    for key, value in snap.summary().items():
        if key == "synced_to_chain":
            shown = "[green]yes[/green]" if value else "[red]no[/red]"
        else:
            shown = str(value)
        table.add_row(key, shown)

    console.print(table)


if __name__ == "__main__":
    cli()
