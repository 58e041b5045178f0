"""Tests for LightningClient: snapshot assembly, error typing, count derivation."""

import pytest

from conftest import FakeStub
from lightning_exporter.client.lightning import LightningClient
from lightning_exporter.errors import ConstructionError, RemoteError
from lightning_exporter.metrics import synced_flag


def test_synced_flag_maps_to_one_and_zero():
    assert synced_flag(True) == 1
    assert synced_flag(False) == 0


def test_construct_performs_initial_fetch(stub):
    LightningClient(stub)
    assert stub.calls == ["wallet_balance", "get_info", "pending_channels"]


def test_construct_fails_with_connection_error():
    stub = FakeStub()
    stub.fail.add("get_info")

    with pytest.raises(ConstructionError) as excinfo:
        LightningClient(stub)

    assert isinstance(excinfo.value, ConnectionError)
    assert isinstance(excinfo.value.__cause__, RemoteError)
    assert "get_info" in str(excinfo.value)


def test_fetch_snapshot_maps_all_fields(stub):
    snap = LightningClient(stub).fetch_snapshot()

    assert snap.wallet.total_balance == 500
    assert snap.wallet.confirmed_balance == 400
    assert snap.wallet.unconfirmed_balance == 100
    assert snap.info.num_peers == 7
    assert snap.info.num_active_channels == 5
    assert snap.info.num_inactive_channels == 1
    assert snap.info.num_pending_channels == 2
    assert snap.info.block_height == 860123
    assert snap.info.synced_to_chain == 1
    assert snap.pending.total_limbo_balance == 250000


def test_pending_counts_come_from_list_lengths(stub):
    # A reported counter that disagrees with the list must be ignored
    stub.pending["num_pending_open_channels"] = 99
    snap = LightningClient(stub).fetch_snapshot()

    assert snap.pending.num_opening == 3
    assert snap.pending.num_closing == 1
    assert snap.pending.num_force_closing == 2
    assert snap.pending.num_waiting_close == 1


def test_rest_gateway_string_integers_are_accepted():
    stub = FakeStub(wallet={"total_balance": "-20", "confirmed_balance": "-30", "unconfirmed_balance": "10"})
    wallet = LightningClient(stub).fetch_wallet_balances()

    assert wallet.total_balance == -20
    assert wallet.confirmed_balance == -30
    assert wallet.unconfirmed_balance == 10


def test_missing_fields_default_to_zero():
    stub = FakeStub(info={"block_height": 10}, pending={})
    client = LightningClient(stub)

    info = client.fetch_node_info()
    assert info.num_peers == 0
    assert info.synced_to_chain == 0

    pending = client.fetch_pending_channels()
    assert pending.num_opening == 0
    assert pending.total_limbo_balance == 0


def test_rpc_failure_raises_remote_error_naming_the_call(stub):
    client = LightningClient(stub)
    stub.fail.add("pending_channels")

    with pytest.raises(RemoteError) as excinfo:
        client.fetch_snapshot()

    assert excinfo.value.call == "pending_channels"
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)


def test_fetch_is_all_or_nothing(stub):
    client = LightningClient(stub)
    stub.fail.add("wallet_balance")
    stub.calls.clear()

    with pytest.raises(RemoteError):
        client.fetch_snapshot()

    # Stops at the first failure, nothing partial comes back
    assert stub.calls == ["wallet_balance"]


def test_no_retry_on_failure(stub):
    client = LightningClient(stub)
    stub.fail.add("get_info")
    stub.calls.clear()

    with pytest.raises(RemoteError):
        client.fetch_node_info()

    assert stub.calls == ["get_info"]


@pytest.mark.parametrize("field, value", [
    ("confirmed_balance", "lots"),
    ("confirmed_balance", 1.5),
    ("confirmed_balance", True),
])
def test_malformed_integer_is_remote_error(stub, field, value):
    client = LightningClient(stub)
    stub.wallet[field] = value

    with pytest.raises(RemoteError) as excinfo:
        client.fetch_wallet_balances()
    assert excinfo.value.call == "wallet_balance"


def test_malformed_synced_flag_is_remote_error(stub):
    client = LightningClient(stub)
    stub.info["synced_to_chain"] = "true"

    with pytest.raises(RemoteError):
        client.fetch_node_info()


def test_channel_collection_must_be_a_list(stub):
    client = LightningClient(stub)
    stub.pending["pending_open_channels"] = 3

    with pytest.raises(RemoteError):
        client.fetch_pending_channels()


def test_non_mapping_response_is_remote_error(stub):
    client = LightningClient(stub)
    stub.info = ["not", "a", "dict"]

    with pytest.raises(RemoteError) as excinfo:
        client.fetch_node_info()
    assert "unexpected response type" in str(excinfo.value)


def test_close_closes_stub(stub):
    client = LightningClient(stub)
    client.close()
    assert stub.closed


def test_snapshot_summary_has_expected_keys(stub):
    summary = LightningClient(stub).fetch_snapshot().summary()

    for key in ["timestamp", "confirmed_balance_sat", "peers", "block_height",
                "synced_to_chain", "pending_force_closing", "waiting_close"]:
        assert key in summary, f"Missing key: {key}"
