"""Tests for ExporterConfig parsing and validation."""

import pytest

from lightning_exporter.config import ExporterConfig
from lightning_exporter.errors import ConfigurationError


def test_defaults_are_valid():
    config = ExporterConfig()
    config.validate()
    assert config.listen_host_port() == ("0.0.0.0", 9113)
    assert config.rpc_url == "https://localhost:8080"


def test_listen_address_with_host():
    config = ExporterConfig(listen_address="127.0.0.1:9200")
    assert config.listen_host_port() == ("127.0.0.1", 9200)


def test_listen_address_ipv6():
    config = ExporterConfig(listen_address="[::1]:9113")
    assert config.listen_host_port() == ("::1", 9113)


@pytest.mark.parametrize("address", ["9113", "host:http", ":0", ":70000"])
def test_bad_listen_address(address):
    with pytest.raises(ConfigurationError):
        ExporterConfig(listen_address=address).validate()


@pytest.mark.parametrize("path", ["metrics", "/", ""])
def test_bad_metrics_path(path):
    with pytest.raises(ConfigurationError):
        ExporterConfig(metrics_path=path).validate()


def test_empty_rpc_host_rejected():
    with pytest.raises(ConfigurationError):
        ExporterConfig(rpc_host="").validate()


def test_non_positive_timeout_rejected():
    with pytest.raises(ConfigurationError):
        ExporterConfig(timeout_seconds=0).validate()
