"""
Prometheus collector for a Lightning node.

Holds the fixed catalog of metric descriptors and, on every scrape,
fetches one NodeSnapshot and maps it onto gauge samples. Scrapes are
serialized with a lock so the values always come from a single fetch.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from lightning_exporter.client.lightning import LightningClient
from lightning_exporter.config import DEFAULT_NAMESPACE
from lightning_exporter.errors import RemoteError
from lightning_exporter.metrics import NodeSnapshot

log = logging.getLogger(__name__)

# Order here is the emission order. Names must stay stable, dashboards
# depend on them.
METRIC_TABLE: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("wallet_balance_satoshis_total", "Wallet balance in satoshis by confirmation status.", ("status",)),
    ("peers", "Number of currently connected peers.", ()),
    ("channels", "Number of channels by status.", ("status",)),
    ("block_height", "The node's current view of the block height.", ()),
    ("synced_to_chain", "Whether the wallet's view is synced to the main chain (1 or 0).", ()),
    ("channel_limbo_balance_satoshis", "Total balance in satoshis encumbered in pending channels.", ()),
    ("channel_pending", "Number of pending channels by status, split by forced closes.", ("status", "forced")),
    ("channel_waiting_close", "Number of channels waiting for their closing transaction to confirm.", ()),
]


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help_text: str
    label_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricSample:
    descriptor: MetricDescriptor
    value: float
    label_values: Tuple[str, ...] = ()

    @property
    def labels(self) -> Dict[str, str]:
        return dict(zip(self.descriptor.label_names, self.label_values))


def metric_name(namespace: str, suffix: str) -> str:
    return f"{namespace}_{suffix}" if namespace else suffix


class LightningCollector(Collector):
    """Collects node metrics. Registers with a prometheus_client registry."""

    def __init__(self, client: LightningClient, namespace: str = DEFAULT_NAMESPACE):
        self._client = client
        self._lock = threading.Lock()

        self._descriptors: List[MetricDescriptor] = [
            MetricDescriptor(metric_name(namespace, suffix), help_text, labels)
            for suffix, help_text, labels in METRIC_TABLE
        ]
        self._by_suffix: Dict[str, MetricDescriptor] = {
            suffix: desc for (suffix, _, _), desc in zip(METRIC_TABLE, self._descriptors)
        }

    def describe_all(self) -> List[MetricDescriptor]:
        """Every descriptor this collector can ever emit, independent of node state."""
        return list(self._descriptors)

    def collect_samples(self) -> Iterator[MetricSample]:
        """Fetch a snapshot and yield its samples. Yields nothing if the fetch fails."""
        with self._lock:
            try:
                snapshot = self._client.fetch_snapshot()
            except RemoteError as exc:
                log.error("Error getting stats: %s", exc)
                return iter(())

            samples = self._map_snapshot(snapshot)

        log.debug("Collected %d samples", len(samples))
        return iter(samples)

    def _sample(self, suffix: str, value: float, *label_values: str) -> MetricSample:
        return MetricSample(self._by_suffix[suffix], float(value), tuple(label_values))

    def _map_snapshot(self, snap: NodeSnapshot) -> List[MetricSample]:
        wallet, info, pending = snap.wallet, snap.info, snap.pending

        # total_balance is confirmed + unconfirmed, so it isn't emitted
        return [
            self._sample("wallet_balance_satoshis_total", wallet.confirmed_balance, "confirmed"),
            self._sample("wallet_balance_satoshis_total", wallet.unconfirmed_balance, "unconfirmed"),
            self._sample("peers", info.num_peers),
            self._sample("channels", info.num_active_channels, "active"),
            self._sample("channels", info.num_pending_channels, "pending"),
            self._sample("channels", info.num_inactive_channels, "inactive"),
            self._sample("block_height", info.block_height),
            self._sample("synced_to_chain", info.synced_to_chain),
            self._sample("channel_limbo_balance_satoshis", pending.total_limbo_balance),
            self._sample("channel_pending", pending.num_opening, "opening", "false"),
            self._sample("channel_pending", pending.num_closing, "closing", "false"),
            self._sample("channel_pending", pending.num_force_closing, "closing", "true"),
            self._sample("channel_waiting_close", pending.num_waiting_close),
        ]

    def describe(self) -> List[Metric]:
        """Empty families, one per descriptor. Lets the registry check names without an RPC."""
        return [
            GaugeMetricFamily(desc.name, desc.help_text, labels=list(desc.label_names))
            for desc in self._descriptors
        ]

    def collect(self) -> Iterator[Metric]:
        families: Dict[str, GaugeMetricFamily] = {}

        for sample in self.collect_samples():
            desc = sample.descriptor
            family = families.get(desc.name)
            if family is None:
                family = GaugeMetricFamily(desc.name, desc.help_text, labels=list(desc.label_names))
                families[desc.name] = family
            family.add_metric(list(sample.label_values), sample.value)

        for desc in self._descriptors:
            if desc.name in families:
                yield families[desc.name]
