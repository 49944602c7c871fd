"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest
from poloapi.config import Config
from poloapi.exchange.client import PoloniexClient
from poloapi.exchange.params import NonceGenerator


@pytest.fixture
def config() -> Config:
    """Config with test credentials."""
    return Config(
        poloniex_api_key="test-key",
        poloniex_api_secret="test-secret",
        poloniex_public_url="https://poloniex.com/public",
        poloniex_trading_url="https://poloniex.com/tradingApi",
        request_timeout=5.0,
    )


@pytest.fixture
def sample_ticker() -> dict:
    """Sample returnTicker response."""
    return {
        "BTC_ETH": {
            "id": 148,
            "last": "0.05300000",
            "lowestAsk": "0.05310000",
            "highestBid": "0.05290000",
            "percentChange": "-0.01200000",
        },
        "BTC_XMR": {
            "id": 114,
            "last": "0.00620000",
            "lowestAsk": "0.00621000",
            "highestBid": "0.00619000",
            "percentChange": "0.00400000",
        },
    }


@pytest.fixture
def frozen_clock() -> Callable[[], int]:
    """Clock stuck at 2023-11-14 22:13:20.123456789 UTC, in nanoseconds."""
    return lambda: 1_700_000_000_123_456_789


class Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | Exception) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return httpx.Response(
            self.response.status_code,
            headers=self.response.headers,
            content=self.response.content,
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    """Handler returning an empty JSON object; tests may swap the response."""
    return Recorder(httpx.Response(200, json={}))


@pytest.fixture
def client(recorder: Recorder, frozen_clock: Callable[[], int]) -> PoloniexClient:
    """PoloniexClient wired to a mock transport and a frozen clock."""
    return PoloniexClient(
        api_key="test-key",
        api_secret="test-secret",
        transport=httpx.MockTransport(recorder),
        nonce_generator=NonceGenerator(clock=frozen_clock),
    )


@pytest.fixture
def mock_poloniex_client() -> AsyncMock:
    """Mock PoloniexClient for CLI tests."""
    client = AsyncMock(spec=PoloniexClient)
    client.get_ticker = AsyncMock(return_value={"BTC_ETH": {"last": "0.053"}})
    client.get_balances = AsyncMock(return_value={"BTC": "0.5", "ETH": "10"})
    client.buy = AsyncMock(return_value={"orderNumber": "31226040", "resultingTrades": []})
    client.close = AsyncMock(return_value=None)
    return client
