"""
Base stub interface.

A stub is anything that can answer lnd's three read-only queries.
This keeps the client decoupled from how the node is actually reached
(REST gateway, gRPC, mock, etc). Responses are plain mappings keyed
by lnd's own field names.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class LightningStub(ABC):
    """Interface for all node transports."""

    @abstractmethod
    def wallet_balance(self) -> Mapping[str, Any]:
        """WalletBalance: total/confirmed/unconfirmed balance."""
        ...

    @abstractmethod
    def get_info(self) -> Mapping[str, Any]:
        """GetInfo: peers, channel counts, block height, sync state."""
        ...

    @abstractmethod
    def pending_channels(self) -> Mapping[str, Any]:
        """PendingChannels: channel lists per pending state plus limbo balance."""
        ...

    def name(self) -> str:
        return type(self).__name__

    def close(self):
        pass
