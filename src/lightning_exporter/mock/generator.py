"""
Mock Lightning node.

Answers the same three queries as lnd with fake but plausible numbers,
so we can develop and test without a running node. Loosely modeled on
a small routing node with a couple dozen channels on mainnet.
"""

import math
import random
from typing import Any, Dict, List

from lightning_exporter.client.base import LightningStub


class MockLightningNode(LightningStub):

    def __init__(self, seed: int = 42, start_height: int = 860_000):
        self._rng = random.Random(seed)
        self._tick = 0
        self._block_height = start_height
        self._confirmed = 5_000_000
        self.total_channels = 24

    def _advance(self):
        # Each call moves the simulation clock forward
        self._tick += 1
        if self._rng.random() > 0.8:
            self._block_height += 1

    def _fake_channels(self, count: int) -> List[Dict[str, Any]]:
        return [
            {
                "channel": {
                    "remote_node_pub": f"{self._rng.getrandbits(256):064x}",
                    "capacity": str(self._rng.choice([500_000, 1_000_000, 2_000_000])),
                },
            }
            for _ in range(count)
        ]

    def wallet_balance(self) -> Dict[str, Any]:
        self._advance()

        # On-chain balance drifts as channels open and close
        drift = int(200_000 * math.sin(self._tick * 0.05))
        confirmed = max(0, self._confirmed + drift)
        unconfirmed = self._rng.choice([0, 0, 0, 25_000, 100_000])

        # REST gateway style: int64 as strings
        return {
            "total_balance": str(confirmed + unconfirmed),
            "confirmed_balance": str(confirmed),
            "unconfirmed_balance": str(unconfirmed),
        }

    def get_info(self) -> Dict[str, Any]:
        self._advance()

        inactive = self._rng.randint(0, 3)
        pending = self._rng.randint(0, 2)

        return {
            "num_peers": self.total_channels + self._rng.randint(-2, 6),
            "num_active_channels": self.total_channels - inactive,
            "num_inactive_channels": inactive,
            "num_pending_channels": pending,
            "block_height": self._block_height,
            # Briefly out of sync right after a new block
            "synced_to_chain": self._rng.random() > 0.05,
        }

    def pending_channels(self) -> Dict[str, Any]:
        self._advance()

        opening = self._rng.randint(0, 2)
        closing = self._rng.randint(0, 1)
        force_closing = 1 if self._rng.random() > 0.85 else 0
        waiting = self._rng.randint(0, 1)
        limbo = force_closing * self._rng.randint(100_000, 900_000)

        return {
            "total_limbo_balance": str(limbo),
            "pending_open_channels": self._fake_channels(opening),
            "pending_closing_channels": self._fake_channels(closing),
            "pending_force_closing_channels": self._fake_channels(force_closing),
            "waiting_close_channels": self._fake_channels(waiting),
        }

    def name(self) -> str:
        return "Mock lnd (simulated routing node)"
