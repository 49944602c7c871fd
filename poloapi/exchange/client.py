"""Poloniex HTTP API client for market data and trading."""

from __future__ import annotations

import hashlib
import hmac
import platform
from typing import Any, Self, TYPE_CHECKING

import httpx
from loguru import logger

from .params import NonceGenerator, Scalar, build_params, encode_params

if TYPE_CHECKING:
    from types import TracebackType


PUBLIC_URL = "https://poloniex.com/public"
TRADING_URL = "https://poloniex.com/tradingApi"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; poloapi Python client; "
    f"Python/{platform.python_version()})"
)
CHART_PERIODS = frozenset({300, 900, 1800, 7200, 14400, 86400})


class PoloniexClientError(Exception):
    """Base error for failures talking to the Poloniex API."""

    def __init__(self, message: str, response: httpx.Response | None = None):
        super().__init__(message)
        self.response = response


class TransportError(PoloniexClientError):
    """Raised on connection, TLS or timeout failures."""


class DecodingError(PoloniexClientError):
    """Raised when the response body is not valid JSON."""


def select(data: Any, key: str | None) -> Any:
    """Project a single entry out of a decoded mapping.

    Returns the whole value when no key is given and None when the key
    is missing.
    """
    if key is None:
        return data
    if not isinstance(data, dict):
        return None
    return data.get(key)


class PoloniexClient:
    """Async client for the Poloniex public and trading HTTP APIs."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        public_url: str = PUBLIC_URL,
        trading_url: str = TRADING_URL,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
        nonce_generator: NonceGenerator | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self.public_url = public_url
        self.trading_url = trading_url
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._nonces = nonce_generator or NonceGenerator()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        await self._get_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close()

    def _sign(self, payload: str) -> str:
        """Generate the hex HMAC-SHA512 signature of a request body."""
        return hmac.new(
            self.api_secret.encode("utf-8"),
            payload.encode("utf-8"),
            hashlib.sha512,
        ).hexdigest()

    async def _send(self, command: str, request: httpx.Request) -> Any:
        """Send a prepared request and decode its JSON body."""
        client = await self._get_client()
        try:
            response = await client.send(request)
        except httpx.TimeoutException as e:
            logger.error("Poloniex request {} timed out: {}", command, e)
            msg = f"Request timed out: {e}"
            raise TransportError(msg) from e
        except httpx.RequestError as e:
            logger.error("Poloniex request {} failed: {}", command, e)
            raise TransportError(str(e)) from e

        if response.is_error:
            logger.warning(
                "Poloniex request {} returned HTTP {}", command, response.status_code
            )
        try:
            return response.json()
        except ValueError as e:
            logger.error("Poloniex request {} returned invalid JSON: {}", command, e)
            msg = f"Invalid JSON in response to {command}: {e}"
            raise DecodingError(msg, response) from e

    async def _public_request(
        self, command: str, params: dict[str, Scalar | None] | None = None
    ) -> Any:
        """Execute an unauthenticated GET against the public endpoint."""
        query = encode_params(build_params({"command": command}, params))
        url = f"{self.public_url}?{query}"
        logger.debug("GET {}", url)
        client = await self._get_client()
        return await self._send(command, client.build_request("GET", url))

    async def _private_request(
        self, command: str, params: dict[str, Scalar | None] | None = None
    ) -> Any:
        """Execute a signed POST against the trading endpoint."""
        payload = encode_params(
            build_params({"command": command, "nonce": self._nonces.next()}, params)
        )
        headers = {
            "Key": self.api_key,
            "Sign": self._sign(payload),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        logger.debug("POST {} command={}", self.trading_url, command)
        client = await self._get_client()
        request = client.build_request(
            "POST", self.trading_url, content=payload.encode("utf-8"), headers=headers
        )
        return await self._send(command, request)

    # --- Public endpoints ---

    async def get_ticker(self, pair: str | None = None) -> Any:
        """Get the ticker for all markets, or only ``pair`` when given."""
        markets = await self._public_request("returnTicker")
        return select(markets, pair)

    async def get_24h_volume(self, pair: str | None = None) -> Any:
        """Get 24-hour volume for all markets plus primary currency totals."""
        markets = await self._public_request("return24hVolume")
        return select(markets, pair)

    async def get_order_book(self, pair: str = "all", depth: int = 10) -> Any:
        """Get the order book for a market, or for all markets with ``"all"``."""
        return await self._public_request(
            "returnOrderBook", {"currencyPair": pair, "depth": depth}
        )

    async def get_market_trade_history(
        self,
        pair: str,
        start: int | None = None,
        end: int | None = None,
    ) -> Any:
        """Get public trades for a market.

        Without a range the exchange returns the last 200 trades; with
        ``start``/``end`` (UNIX timestamps) up to 50,000 trades in the range.
        """
        return await self._public_request(
            "returnTradeHistory", {"currencyPair": pair, "start": start, "end": end}
        )

    async def get_chart_data(
        self, pair: str, start: int, end: int, period: int = 14400
    ) -> Any:
        """Get candlestick data.

        Args:
            pair: Currency pair (e.g. BTC_ETH)
            start: Range start as a UNIX timestamp
            end: Range end as a UNIX timestamp
            period: Candle length in seconds, one of 300, 900, 1800, 7200,
                14400 or 86400
        """
        if period not in CHART_PERIODS:
            msg = f"period must be one of {sorted(CHART_PERIODS)}, got {period}"
            raise ValueError(msg)
        return await self._public_request(
            "returnChartData",
            {"currencyPair": pair, "start": start, "end": end, "period": period},
        )

    async def get_currencies(self, currency: str | None = None) -> Any:
        """Get information about all currencies, or only ``currency``."""
        info = await self._public_request("returnCurrencies")
        return select(info, currency)

    async def get_loan_orders(self, currency: str) -> Any:
        """Get lending offers and demands for a currency."""
        return await self._public_request("returnLoanOrders", {"currency": currency})

    # --- Private (signed) endpoints ---

    async def get_balances(self) -> Any:
        """Get available balances."""
        return await self._private_request("returnBalances")

    async def get_complete_balances(self) -> Any:
        """Get available, on-order and estimated BTC value for each balance."""
        return await self._private_request("returnCompleteBalances")

    async def get_deposit_addresses(self) -> Any:
        return await self._private_request("returnDepositAddresses")

    async def get_deposits_withdrawals(self, start: int, end: int) -> Any:
        """Get deposit and withdrawal history between two UNIX timestamps."""
        return await self._private_request(
            "returnDepositsWithdrawals", {"start": start, "end": end}
        )

    async def get_open_orders(self, pair: str = "all") -> Any:
        """Get open orders for a market, or for all markets with ``"all"``."""
        return await self._private_request("returnOpenOrders", {"currencyPair": pair})

    async def get_trade_history(
        self,
        pair: str = "all",
        start: int | None = None,
        end: int | None = None,
        limit: int = 500,
    ) -> Any:
        """Get own trade history for a market or for all markets."""
        return await self._private_request(
            "returnTradeHistory",
            {"currencyPair": pair, "start": start, "end": end, "limit": limit},
        )

    async def get_order_trades(self, order_number: int | str) -> Any:
        """Get all trades involving an order."""
        return await self._private_request(
            "returnOrderTrades", {"orderNumber": order_number}
        )

    async def get_order_status(self, order_number: int | str) -> Any:
        return await self._private_request(
            "returnOrderStatus", {"orderNumber": order_number}
        )

    async def buy(self, pair: str, rate: float, amount: float) -> Any:
        """Place a limit buy order."""
        logger.info("Placing buy order: {} rate={} amount={}", pair, rate, amount)
        result = await self._private_request(
            "buy", {"currencyPair": pair, "rate": rate, "amount": amount}
        )
        logger.info("Order response: {}", result)
        return result

    async def sell(self, pair: str, rate: float, amount: float) -> Any:
        """Place a limit sell order."""
        logger.info("Placing sell order: {} rate={} amount={}", pair, rate, amount)
        result = await self._private_request(
            "sell", {"currencyPair": pair, "rate": rate, "amount": amount}
        )
        logger.info("Order response: {}", result)
        return result

    async def cancel_order(self, order_number: int | str) -> Any:
        """Cancel an open order."""
        logger.info("Cancelling order {}", order_number)
        return await self._private_request("cancelOrder", {"orderNumber": order_number})

    async def get_fee_info(self) -> Any:
        """Get current trading fees and trailing 30-day volume in BTC."""
        return await self._private_request("returnFeeInfo")
