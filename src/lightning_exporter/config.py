"""Exporter configuration. Built once by the CLI and passed down explicitly."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from lightning_exporter.errors import ConfigurationError

DEFAULT_NAMESPACE = "lnd"
DEFAULT_LISTEN_ADDRESS = ":9113"
DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_RPC_HOST = "localhost"
DEFAULT_RPC_PORT = 8080  # lnd's REST gateway, gRPC is 10009
DEFAULT_TLS_CERT_PATH = "~/.lnd/tls.cert"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ExporterConfig:
    namespace: str = DEFAULT_NAMESPACE
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    metrics_path: str = DEFAULT_METRICS_PATH
    rpc_host: str = DEFAULT_RPC_HOST
    rpc_port: int = DEFAULT_RPC_PORT
    tls_cert_path: str = DEFAULT_TLS_CERT_PATH
    macaroon_path: str = ""
    process_metrics: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def rpc_url(self) -> str:
        return f"https://{self.rpc_host}:{self.rpc_port}"

    def listen_host_port(self) -> Tuple[str, int]:
        """Split listen_address into (host, port). An empty host means all interfaces."""
        host, sep, port = self.listen_address.rpartition(":")
        if not sep:
            raise ConfigurationError(f"listen address must be host:port, got {self.listen_address!r}")
        try:
            port_num = int(port)
        except ValueError:
            raise ConfigurationError(f"invalid listen port in {self.listen_address!r}") from None
        if not 0 < port_num < 65536:
            raise ConfigurationError(f"listen port out of range: {port_num}")
        return host.strip("[]") or "0.0.0.0", port_num

    def validate(self):
        self.listen_host_port()

        if not self.metrics_path.startswith("/") or self.metrics_path == "/":
            raise ConfigurationError(
                f"telemetry path must start with '/' and not be the root, got {self.metrics_path!r}"
            )
        if not self.rpc_host:
            raise ConfigurationError("rpc host must not be empty")
        if not 0 < self.rpc_port < 65536:
            raise ConfigurationError(f"rpc port out of range: {self.rpc_port}")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("rpc timeout must be positive")
