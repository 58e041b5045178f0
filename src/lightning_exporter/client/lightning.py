"""
Client for a Lightning node. Wraps a LightningStub and maps its three
responses into a NodeSnapshot.

Fetching is all-or-nothing: if any of the calls fails, or answers with
something that doesn't look like lnd's schema, the whole fetch raises
RemoteError. Nothing is retried here, the next scrape is the retry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence

from lightning_exporter.client.base import LightningStub
from lightning_exporter.errors import ConstructionError, RemoteError
from lightning_exporter.metrics import (
    NodeInfo,
    NodeSnapshot,
    PendingChannels,
    WalletBalances,
    synced_flag,
)

log = logging.getLogger(__name__)


def _int_field(resp: Mapping[str, Any], key: str, call: str) -> int:
    # proto3 drops zero values; the REST gateway sends int64 as strings
    value = resp.get(key, 0)
    if isinstance(value, bool):
        raise RemoteError(call, f"field {key!r} is a boolean, expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise RemoteError(call, f"field {key!r} is not an integer: {value!r}") from None
    raise RemoteError(call, f"field {key!r} has unexpected type {type(value).__name__}")


def _bool_field(resp: Mapping[str, Any], key: str, call: str) -> bool:
    value = resp.get(key, False)
    if not isinstance(value, bool):
        raise RemoteError(call, f"field {key!r} is not a boolean: {value!r}")
    return value


def _list_field(resp: Mapping[str, Any], key: str, call: str) -> Sequence[Any]:
    value = resp.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise RemoteError(call, f"field {key!r} is not a list")
    return value


class LightningClient:
    """Fetches node state. Fails on construction if the node can't be read."""

    def __init__(self, stub: LightningStub):
        self._stub = stub

        try:
            self.fetch_snapshot()
        except RemoteError as exc:
            raise ConstructionError(f"Failed to create LightningClient: {exc}") from exc

        log.info("Connected to Lightning node via %s", stub.name())

    def _call(self, call: str, method: Callable[[], Mapping[str, Any]]) -> Mapping[str, Any]:
        try:
            resp = method()
        except Exception as exc:
            raise RemoteError(call, str(exc) or type(exc).__name__) from exc

        if not isinstance(resp, Mapping):
            raise RemoteError(call, f"unexpected response type {type(resp).__name__}")
        return resp

    def fetch_wallet_balances(self) -> WalletBalances:
        call = "wallet_balance"
        resp = self._call(call, self._stub.wallet_balance)

        return WalletBalances(
            total_balance=_int_field(resp, "total_balance", call),
            confirmed_balance=_int_field(resp, "confirmed_balance", call),
            unconfirmed_balance=_int_field(resp, "unconfirmed_balance", call),
        )

    def fetch_node_info(self) -> NodeInfo:
        call = "get_info"
        resp = self._call(call, self._stub.get_info)

        return NodeInfo(
            num_peers=_int_field(resp, "num_peers", call),
            num_active_channels=_int_field(resp, "num_active_channels", call),
            num_inactive_channels=_int_field(resp, "num_inactive_channels", call),
            num_pending_channels=_int_field(resp, "num_pending_channels", call),
            block_height=_int_field(resp, "block_height", call),
            synced_to_chain=synced_flag(_bool_field(resp, "synced_to_chain", call)),
        )

    def fetch_pending_channels(self) -> PendingChannels:
        call = "pending_channels"
        resp = self._call(call, self._stub.pending_channels)

        # Always count the lists, even where lnd also reports a number,
        # so the gauges agree with what the node actually returned.
        return PendingChannels(
            total_limbo_balance=_int_field(resp, "total_limbo_balance", call),
            num_opening=len(_list_field(resp, "pending_open_channels", call)),
            num_closing=len(_list_field(resp, "pending_closing_channels", call)),
            num_force_closing=len(_list_field(resp, "pending_force_closing_channels", call)),
            num_waiting_close=len(_list_field(resp, "waiting_close_channels", call)),
        )

    def fetch_snapshot(self) -> NodeSnapshot:
        """Issue all three queries and return one snapshot, or raise RemoteError."""
        wallet = self.fetch_wallet_balances()
        info = self.fetch_node_info()
        pending = self.fetch_pending_channels()

        return NodeSnapshot(
            timestamp=datetime.now(timezone.utc),
            wallet=wallet,
            info=info,
            pending=pending,
        )

    def name(self) -> str:
        return f"lnd ({self._stub.name()})"

    def close(self):
        self._stub.close()
