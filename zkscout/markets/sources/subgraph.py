"""Base APR from Uniswap-v3-style subgraphs.

PancakeSwap v3 exposes daily fee buckets, Koi exposes hourly ones. Both are
summed over the trailing week and annualized:

    APR = sum(feesUSD over last 7d) * 52 / totalValueLockedUSD * 100
"""
from __future__ import annotations

import logging
from typing import Sequence

import httpx

from zkscout.config import Settings, settings as default_settings
from zkscout.markets.sources.base import AprProvider, AprResult, match_original
from zkscout.tools.web import post_json

logger = logging.getLogger(__name__)

WEEKS_PER_YEAR = 52
MAX_POOLS = 1000


def weekly_fee_apr(fees_usd: Sequence[str | float], tvl_usd: str | float) -> float:
    """Annualized fee APR in percent; 0 when TVL is not positive."""
    weekly_fees = sum(float(f) for f in fees_usd)
    tvl = float(tvl_usd)
    if tvl <= 0:
        return 0.0
    return weekly_fees * WEEKS_PER_YEAR / tvl * 100


class SubgraphAprProvider(AprProvider):
    """Shared logic for subgraphs that return pools with fee buckets.

    Subclasses set the bucket field, how many buckets make a week and the
    field the buckets are ordered by (newest first).
    """

    name = "subgraph"
    bucket_field: str = "poolDayData"
    bucket_order_by: str = "date"
    buckets_per_week: int = 7

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._transport = transport

    @property
    def url(self) -> str:
        raise NotImplementedError

    def build_query(self) -> str:
        return (
            "{\n"
            f"  pools(first: {MAX_POOLS}) {{\n"
            "    id\n"
            "    totalValueLockedUSD\n"
            f"    {self.bucket_field}(first: {self.buckets_per_week}, "
            f"orderBy: {self.bucket_order_by}, orderDirection: desc) {{\n"
            "      feesUSD\n"
            "    }\n"
            "  }\n"
            "}"
        )

    async def compute_base_apr(self, identifiers: Sequence[str]) -> AprResult:
        if not identifiers:
            return {}

        try:
            body = await post_json(
                self.url,
                {"query": self.build_query()},
                timeout=self.settings.http_timeout_seconds,
                transport=self._transport,
            )
            if body.get("errors"):
                raise ValueError(f"subgraph errors: {body['errors']}")
            pools = body["data"]["pools"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("%s subgraph fetch failed: %s", self.name, exc)
            return {}

        if not pools:
            logger.warning("%s subgraph returned no pools", self.name)
            return {}

        wanted = match_original(identifiers)
        result: AprResult = {}
        for pool in pools:
            if not isinstance(pool, dict):
                logger.debug("Skipping malformed %s pool: %r", self.name, pool)
                continue
            originals = wanted.get(str(pool.get("id", "")).lower())
            if not originals:
                continue
            apr = self._pool_apr(pool)
            if apr is None:
                continue
            for original in originals:
                result[original] = apr

        logger.info("%s: base APR for %d/%d pools", self.name, len(result), len(identifiers))
        return result

    def _pool_apr(self, pool: dict) -> float | None:
        try:
            buckets = pool[self.bucket_field][: self.buckets_per_week]
            return weekly_fee_apr([b["feesUSD"] for b in buckets], pool["totalValueLockedUSD"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Skipping %s pool %s: %s", self.name, pool.get("id"), exc)
            return None


class PancakeSwapAprProvider(SubgraphAprProvider):
    """PancakeSwap v3 on zkSync, 7 daily buckets."""

    name = "pancakeswap"
    bucket_field = "poolDayData"
    bucket_order_by = "date"
    buckets_per_week = 7

    @property
    def url(self) -> str:
        return self.settings.pancakeswap_subgraph_url


class KoiAprProvider(SubgraphAprProvider):
    """Koi Finance, 168 hourly buckets. Needs a Graph gateway API key."""

    name = "koi"
    bucket_field = "poolHourData"
    bucket_order_by = "periodStartUnix"
    buckets_per_week = 168

    @property
    def url(self) -> str:
        return self.settings.koi_subgraph_url
