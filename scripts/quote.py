#!/usr/bin/env python3
"""Fetch aggregated quotes from the command line.

Example:
    python scripts/quote.py evm--1 evm--1 "" 0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48 0.5 \
        --user 0x1111111111111111111111111111111111111111
"""

import argparse
import asyncio
import logging

from dotenv import load_dotenv

load_dotenv()

from bitrabo.config import get_settings
from bitrabo.routing.base import SwapRequest
from bitrabo.routing.factory import create_aggregator
from bitrabo.units import DEFAULT_DECIMALS, NATIVE_TOKEN_ADDRESS, normalize_native, to_smallest_units


async def show_quotes(args: argparse.Namespace) -> None:
    settings = get_settings()
    aggregator = create_aggregator(settings)

    request = SwapRequest(
        from_network_id=args.from_network,
        to_network_id=args.to_network,
        from_token_address=normalize_native(args.from_token) or NATIVE_TOKEN_ADDRESS,
        to_token_address=normalize_native(args.to_token),
        from_token_amount=to_smallest_units(args.amount, args.decimals),
        user_address=args.user,
        slippage_bps=args.slippage_bps,
    )

    quotes = await aggregator.aggregate(request)
    if not quotes:
        print("No quotes available")
        return

    for quote in quotes:
        marker = "*" if quote.is_best else " "
        print(f" {marker} {quote.provider:<12} {quote.to_amount:>30}  min={quote.to_amount_min or '-'}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Aggregated swap quotes")
    parser.add_argument("from_network", help="Source network id, e.g. evm--1")
    parser.add_argument("to_network", help="Destination network id")
    parser.add_argument("from_token", help="Source token address ('' for native)")
    parser.add_argument("to_token", help="Destination token address")
    parser.add_argument("amount", help="Human-readable input amount")
    parser.add_argument("--decimals", type=int, default=DEFAULT_DECIMALS,
                        help="Source token decimals")
    parser.add_argument("--user", default="", help="Sender wallet address")
    parser.add_argument("--slippage-bps", type=int, default=None,
                        help="Slippage tolerance in basis points")
    parser.add_argument("--verbose", action="store_true", help="Log provider calls")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    asyncio.run(show_quotes(args))
