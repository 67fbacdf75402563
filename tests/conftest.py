#Description: Shared fixtures: temp SQLite store, deterministic nonces, mock Kraken transport.

import base64
import itertools
import json

import httpx
import pytest

from adapters.kraken_spot import KrakenSpotAdapter
from models.db import create_db_engine
from services.store import SignalStore

API_KEY = "test-key"
API_SECRET = base64.b64encode(b"super-secret-kraken-key-bytes").decode()


@pytest.fixture
def store(tmp_path):
    s = SignalStore(create_db_engine(f"sqlite:///{tmp_path / 'test.db'}"))
    yield s
    s.close()


@pytest.fixture
def nonces():
    return itertools.count(1000).__next__


def envelope(result=None, error=None, status_code=200):
    body = {"error": error or []}
    if result is not None:
        body["result"] = result
    return httpx.Response(status_code, content=json.dumps(body).encode())


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def record(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def kraken_factory(nonces):
    def make(handler):
        transport = RecordingTransport(handler)
        adapter = KrakenSpotAdapter(API_KEY, API_SECRET, base_url="https://kraken.test", nonce=nonces,
                                    client=httpx.Client(transport=transport))
        return adapter, transport
    return make
