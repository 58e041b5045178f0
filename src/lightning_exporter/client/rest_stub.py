"""
Stub for lnd's REST gateway. Same queries as the gRPC API, served as
JSON over HTTPS, with the macaroon passed hex-encoded in a header.

The node's self-signed tls.cert is used as the only trusted CA.
"""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx

from lightning_exporter.client.base import LightningStub
from lightning_exporter.errors import ConfigurationError

log = logging.getLogger(__name__)

MACAROON_HEADER = "Grpc-Metadata-macaroon"

WALLET_BALANCE_PATH = "/v1/balance/blockchain"
GET_INFO_PATH = "/v1/getinfo"
PENDING_CHANNELS_PATH = "/v1/channels/pending"


def read_macaroon(path: str) -> str:
    """Read a binary macaroon file and return it hex-encoded."""
    macaroon_file = Path(path).expanduser()
    if not macaroon_file.is_file():
        raise ConfigurationError(f"could not find macaroon: {macaroon_file}")
    try:
        return macaroon_file.read_bytes().hex()
    except OSError as exc:
        raise ConfigurationError(f"unable to read macaroon {macaroon_file}: {exc}") from exc


def tls_context(cert_path: str) -> ssl.SSLContext:
    cert_file = Path(cert_path).expanduser()
    if not cert_file.is_file():
        raise ConfigurationError(f"could not find TLS certificate: {cert_file}")
    try:
        return ssl.create_default_context(cafile=str(cert_file))
    except OSError as exc:
        raise ConfigurationError(f"unable to load TLS certificate {cert_file}: {exc}") from exc


class LndRestStub(LightningStub):

    def __init__(
        self,
        base_url: str,
        tls_cert_path: Optional[str] = None,
        macaroon_path: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")

        headers = {}
        if macaroon_path:
            headers[MACAROON_HEADER] = read_macaroon(macaroon_path)
        else:
            log.warning("No macaroon configured, lnd will reject authenticated calls")

        verify = tls_context(tls_cert_path) if tls_cert_path else True

        self._client = httpx.Client(
            base_url=self._base_url,
            headers=headers,
            verify=verify,
            timeout=timeout_seconds,
            transport=transport,
        )

    def _get(self, path: str) -> Mapping[str, Any]:
        response = self._client.get(path)
        response.raise_for_status()
        return response.json()

    def wallet_balance(self) -> Mapping[str, Any]:
        return self._get(WALLET_BALANCE_PATH)

    def get_info(self) -> Mapping[str, Any]:
        return self._get(GET_INFO_PATH)

    def pending_channels(self) -> Mapping[str, Any]:
        return self._get(PENDING_CHANNELS_PATH)

    def name(self) -> str:
        return f"REST ({self._base_url})"

    def close(self):
        self._client.close()
