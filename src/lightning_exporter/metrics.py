"""
Node state records for the exporter.

These mirror the three lnd queries we sample on every scrape:
WalletBalance, GetInfo and PendingChannels. A NodeSnapshot bundles
one reading of each and is thrown away once the scrape is done.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def synced_flag(synced: bool) -> int:
    """Map lnd's synced_to_chain boolean onto a gauge value (1 or 0)."""
    return 1 if synced else 0


@dataclass(frozen=True)
class WalletBalances:
    # Satoshis. Signed, lnd reports int64.
    total_balance: int = 0
    confirmed_balance: int = 0
    unconfirmed_balance: int = 0


@dataclass(frozen=True)
class NodeInfo:
    num_peers: int = 0
    num_active_channels: int = 0
    num_inactive_channels: int = 0
    num_pending_channels: int = 0
    block_height: int = 0
    synced_to_chain: int = 0  # 1 or 0, see synced_flag()


@dataclass(frozen=True)
class PendingChannels:
    total_limbo_balance: int = 0

    # Lengths of the channel lists lnd returns, not its own counters
    num_opening: int = 0
    num_closing: int = 0
    num_force_closing: int = 0
    num_waiting_close: int = 0


@dataclass(frozen=True)
class NodeSnapshot:
    """A single point-in-time reading from a Lightning node."""

    timestamp: datetime
    wallet: WalletBalances
    info: NodeInfo
    pending: PendingChannels

    def summary(self) -> dict:
        """Return a plain dict for display."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "total_balance_sat": self.wallet.total_balance,
            "confirmed_balance_sat": self.wallet.confirmed_balance,
            "unconfirmed_balance_sat": self.wallet.unconfirmed_balance,
            "peers": self.info.num_peers,
            "active_channels": self.info.num_active_channels,
            "inactive_channels": self.info.num_inactive_channels,
            "pending_channels": self.info.num_pending_channels,
            "block_height": self.info.block_height,
            "synced_to_chain": self.info.synced_to_chain,
            "limbo_balance_sat": self.pending.total_limbo_balance,
            "pending_opening": self.pending.num_opening,
            "pending_closing": self.pending.num_closing,
            "pending_force_closing": self.pending.num_force_closing,
            "waiting_close": self.pending.num_waiting_close,
        }
