"""Command-line interface for the Poloniex client."""

from __future__ import annotations

import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import asyncclick as click
from loguru import logger

from .config import Config
from .exchange.client import PoloniexClient, PoloniexClientError


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _exchange_error(result: Any) -> str | None:
    """Return the exchange-reported error message, if the body carries one."""
    if isinstance(result, dict) and "error" in result:
        return str(result["error"])
    return None


async def run_command(
    config: Config,
    call: Callable[[PoloniexClient], Awaitable[Any]],
    private: bool = False,
) -> int:
    """Run one API call and print its JSON result. Returns 0 on success, 1 on error."""
    errors = config.validate(require_credentials=private)
    if errors:
        for err in errors:
            logger.error("Config error: {}", err)
        if private:
            logger.info(
                "Copy .env.example to .env and set POLONIEX_API_KEY, POLONIEX_API_SECRET."
            )
        return 1

    client = PoloniexClient(
        api_key=config.poloniex_api_key,
        api_secret=config.poloniex_api_secret,
        public_url=config.poloniex_public_url,
        trading_url=config.poloniex_trading_url,
        timeout=config.request_timeout,
        user_agent=config.user_agent,
    )
    try:
        result = await call(client)
    except PoloniexClientError as e:
        logger.error("Request failed: {}", e)
        return 1
    finally:
        await client.close()

    click.echo(json.dumps(result, indent=2))
    if result is None:
        logger.warning("No matching entry in response")
        return 1
    if (message := _exchange_error(result)) is not None:
        logger.error("Exchange error: {}", message)
        return 1
    return 0


async def _execute(
    ctx: click.Context,
    call: Callable[[PoloniexClient], Awaitable[Any]],
    private: bool = False,
) -> None:
    exit_code = await run_command(ctx.obj, call, private=private)
    raise SystemExit(exit_code)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """poloapi - Poloniex HTTP API client."""
    config = Config()
    _configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


# --- Public commands ---


@cli.command()
@click.option("--pair", default=None, help="Only show this currency pair")
@click.pass_context
async def ticker(ctx: click.Context, pair: str | None) -> None:
    """Show the ticker for all markets."""
    await _execute(ctx, lambda c: c.get_ticker(pair))


@cli.command()
@click.option("--pair", default=None, help="Only show this currency pair")
@click.pass_context
async def volume(ctx: click.Context, pair: str | None) -> None:
    """Show 24-hour volume for all markets."""
    await _execute(ctx, lambda c: c.get_24h_volume(pair))


@cli.command("order-book")
@click.option("--pair", default="all", show_default=True)
@click.option("--depth", default=10, show_default=True, type=int)
@click.pass_context
async def order_book(ctx: click.Context, pair: str, depth: int) -> None:
    """Show the order book for a market."""
    await _execute(ctx, lambda c: c.get_order_book(pair, depth))


@cli.command()
@click.argument("pair")
@click.option("--start", default=None, type=int, help="UNIX timestamp")
@click.option("--end", default=None, type=int, help="UNIX timestamp")
@click.pass_context
async def trades(
    ctx: click.Context, pair: str, start: int | None, end: int | None
) -> None:
    """Show public trade history for a market."""
    await _execute(ctx, lambda c: c.get_market_trade_history(pair, start, end))


@cli.command()
@click.argument("pair")
@click.argument("start", type=int)
@click.argument("end", type=int)
@click.option(
    "--period",
    default="14400",
    show_default=True,
    type=click.Choice(["300", "900", "1800", "7200", "14400", "86400"]),
)
@click.pass_context
async def chart(
    ctx: click.Context, pair: str, start: int, end: int, period: str
) -> None:
    """Show candlestick data for a market."""
    await _execute(ctx, lambda c: c.get_chart_data(pair, start, end, int(period)))


@cli.command()
@click.option("--currency", default=None, help="Only show this currency")
@click.pass_context
async def currencies(ctx: click.Context, currency: str | None) -> None:
    """Show information about currencies."""
    await _execute(ctx, lambda c: c.get_currencies(currency))


@cli.command("loan-orders")
@click.argument("currency")
@click.pass_context
async def loan_orders(ctx: click.Context, currency: str) -> None:
    """Show loan offers and demands for a currency."""
    await _execute(ctx, lambda c: c.get_loan_orders(currency))


# --- Trading commands ---


@cli.command()
@click.option("--complete", is_flag=True, help="Include on-order and BTC value")
@click.pass_context
async def balances(ctx: click.Context, complete: bool) -> None:
    """Show account balances."""
    if complete:
        await _execute(ctx, lambda c: c.get_complete_balances(), private=True)
    else:
        await _execute(ctx, lambda c: c.get_balances(), private=True)


@cli.command("open-orders")
@click.option("--pair", default="all", show_default=True)
@click.pass_context
async def open_orders(ctx: click.Context, pair: str) -> None:
    """Show open orders."""
    await _execute(ctx, lambda c: c.get_open_orders(pair), private=True)


@cli.command("order-status")
@click.argument("order_number")
@click.pass_context
async def order_status(ctx: click.Context, order_number: str) -> None:
    """Show the status of an order."""
    await _execute(ctx, lambda c: c.get_order_status(order_number), private=True)


@cli.command()
@click.argument("pair")
@click.argument("rate", type=float)
@click.argument("amount", type=float)
@click.pass_context
async def buy(ctx: click.Context, pair: str, rate: float, amount: float) -> None:
    """Place a limit buy order."""
    await _execute(ctx, lambda c: c.buy(pair, rate, amount), private=True)


@cli.command()
@click.argument("pair")
@click.argument("rate", type=float)
@click.argument("amount", type=float)
@click.pass_context
async def sell(ctx: click.Context, pair: str, rate: float, amount: float) -> None:
    """Place a limit sell order."""
    await _execute(ctx, lambda c: c.sell(pair, rate, amount), private=True)


@cli.command()
@click.argument("order_number")
@click.pass_context
async def cancel(ctx: click.Context, order_number: str) -> None:
    """Cancel an open order."""
    await _execute(ctx, lambda c: c.cancel_order(order_number), private=True)


@cli.command()
@click.pass_context
async def fees(ctx: click.Context) -> None:
    """Show trading fees and 30-day volume."""
    await _execute(ctx, lambda c: c.get_fee_info(), private=True)
