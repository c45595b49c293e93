"""Base APR for Maverick pools from the public ticker feed.

Each ticker carries the last price, 24h volume in the target currency and
pool liquidity in USD. With a flat fee tier:

    daily_fees = target_volume * last_price * fee_tier / 100
    APR        = daily_fees * 365 / liquidity_in_usd * 100
"""
from __future__ import annotations

import logging
import math
from typing import Sequence

import httpx

from zkscout.config import Settings, settings as default_settings
from zkscout.markets.sources.base import AprProvider, AprResult, match_original
from zkscout.tools.web import fetch_json

logger = logging.getLogger(__name__)

DAYS_IN_YEAR = 365


def round_apr(apr: float) -> float:
    """Round to 2 decimals, half-up on the binary float (1.005 -> 1.0)."""
    return math.floor(apr * 100 + 0.5) / 100


def ticker_apr(
    last_price: float,
    target_volume: float,
    liquidity_in_usd: float,
    fee_tier: float,
) -> float:
    """Fee APR in percent, rounded with round_apr. Raises ValueError if not finite."""
    if liquidity_in_usd <= 0:
        return 0.0
    daily_volume_usd = target_volume * last_price
    daily_fees = daily_volume_usd * (fee_tier / 100)
    annualized_fees = daily_fees * DAYS_IN_YEAR
    apr = annualized_fees / liquidity_in_usd * 100
    if not math.isfinite(apr):
        raise ValueError(f"non-finite APR {apr}")
    return round_apr(apr)


def _is_valid(ticker: dict) -> bool:
    try:
        liquidity = float(ticker["liquidity_in_usd"])
        price = float(ticker["last_price"])
        volume = float(ticker["target_volume"])
    except (KeyError, TypeError, ValueError):
        return False
    if not all(math.isfinite(v) for v in (liquidity, price, volume)):
        return False
    return liquidity > 0 and price > 0 and volume >= 0


class MaverickAprProvider(AprProvider):
    """Computes Maverick base APRs from /tickers."""

    name = "maverick"

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        fee_tier: float | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.fee_tier = self.settings.maverick_fee_tier if fee_tier is None else fee_tier
        self._transport = transport

    async def compute_base_apr(self, identifiers: Sequence[str]) -> AprResult:
        if not identifiers:
            return {}

        try:
            tickers = await fetch_json(
                self.settings.maverick_ticker_url,
                params={"chainId": self.settings.chain_id},
                timeout=self.settings.http_timeout_seconds,
                transport=self._transport,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Maverick ticker fetch failed: %s", exc)
            return {}

        if not isinstance(tickers, list):
            logger.warning("Maverick ticker response is not a list: %r", type(tickers).__name__)
            return {}

        valid = [t for t in tickers if isinstance(t, dict) and _is_valid(t)]
        logger.debug("Maverick: %d/%d tickers usable", len(valid), len(tickers))

        wanted = match_original(identifiers)
        result: AprResult = {}
        for ticker in valid:
            originals = wanted.get(str(ticker.get("pool_id", "")).lower())
            if not originals:
                continue
            try:
                apr = ticker_apr(
                    last_price=float(ticker["last_price"]),
                    target_volume=float(ticker["target_volume"]),
                    liquidity_in_usd=float(ticker["liquidity_in_usd"]),
                    fee_tier=self.fee_tier,
                )
            except ValueError as exc:
                logger.debug("Skipping Maverick pool %s: %s", ticker.get("pool_id"), exc)
                continue
            for original in originals:
                result[original] = apr

        logger.info("maverick: base APR for %d/%d pools", len(result), len(identifiers))
        return result
