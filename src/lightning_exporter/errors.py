"""Exception types raised by the exporter."""

from __future__ import annotations


class ExporterError(Exception):
    """Base class for everything the exporter raises on purpose."""


class ConfigurationError(ExporterError):
    """Flags, environment or credential files don't add up."""


class ConstructionError(ExporterError, ConnectionError):
    """The node couldn't be reached (or answered garbage) at startup."""


class RemoteError(ExporterError):
    """One RPC call failed or returned something we can't map."""

    def __init__(self, call: str, message: str):
        super().__init__(call, message)
        self.call = call
        self.message = message

    def __str__(self) -> str:
        return f"{self.call}: {self.message}"
