"""Prometheus exporter for Lightning Network (lnd) nodes."""

__version__ = "0.3.0"
