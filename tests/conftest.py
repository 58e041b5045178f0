"""Shared fakes for client and collector tests."""

import threading
import time

import pytest

from lightning_exporter.client.base import LightningStub


WALLET = {"total_balance": 500, "confirmed_balance": 400, "unconfirmed_balance": 100}

INFO = {
    "num_peers": 7,
    "num_active_channels": 5,
    "num_inactive_channels": 1,
    "num_pending_channels": 2,
    "block_height": 860123,
    "synced_to_chain": True,
}

PENDING = {
    "total_limbo_balance": 250000,
    "pending_open_channels": [{}, {}, {}],
    "pending_closing_channels": [{}],
    "pending_force_closing_channels": [{}, {}],
    "waiting_close_channels": [{}],
}


class FakeStub(LightningStub):
    """Returns canned responses. Set `fail` to a call name to make it raise."""

    def __init__(self, wallet=None, info=None, pending=None):
        self.wallet = dict(WALLET if wallet is None else wallet)
        self.info = dict(INFO if info is None else info)
        self.pending = dict(PENDING if pending is None else pending)
        self.fail = set()
        self.calls = []
        self.closed = False

    def _answer(self, call, resp):
        self.calls.append(call)
        if call in self.fail:
            raise ConnectionResetError(f"{call} went away")
        return resp

    def wallet_balance(self):
        return self._answer("wallet_balance", self.wallet)

    def get_info(self):
        return self._answer("get_info", self.info)

    def pending_channels(self):
        return self._answer("pending_channels", self.pending)

    def close(self):
        self.closed = True


class OverlapDetectingStub(FakeStub):
    """Records whether any call starts while another is still in flight."""

    def __init__(self, delay: float = 0.005):
        super().__init__()
        self._delay = delay
        self._guard = threading.Lock()
        self._in_flight = 0
        self.overlaps = 0

    def _answer(self, call, resp):
        with self._guard:
            if self._in_flight:
                self.overlaps += 1
            self._in_flight += 1
        try:
            time.sleep(self._delay)
            return super()._answer(call, resp)
        finally:
            with self._guard:
                self._in_flight -= 1


@pytest.fixture
def stub():
    return FakeStub()
