"""OpportunityScanner — fetch, enhance every protocol concurrently, rank."""
from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Sequence

from zkscout.config import Settings, settings as default_settings
from zkscout.markets.enhancer import enhance
from zkscout.markets.fetcher import OpportunityFetcher
from zkscout.markets.scorer import rank
from zkscout.markets.sources.base import AprProvider, EnhancedOpportunity, Opportunity
from zkscout.markets.sources.scraper import SyncSwapAprProvider
from zkscout.markets.sources.subgraph import KoiAprProvider, PancakeSwapAprProvider
from zkscout.markets.sources.ticker import MaverickAprProvider

logger = logging.getLogger(__name__)


def default_providers(settings: Settings) -> dict[str, AprProvider]:
    """Protocol key -> provider, keyed like fetcher.PROTOCOL_MAP values."""
    return {
        "koi": KoiAprProvider(settings),
        "pancakeswap": PancakeSwapAprProvider(settings),
        "syncswap": SyncSwapAprProvider(settings),
        "maverick": MaverickAprProvider(settings),
    }


class OpportunityScanner:
    """Runs one pipeline pass and returns the ranked opportunities."""

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: OpportunityFetcher | None = None,
        providers: Mapping[str, AprProvider] | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.fetcher = fetcher or OpportunityFetcher(self.settings)
        self.providers = dict(providers) if providers is not None else default_providers(self.settings)

    async def scan(self) -> list[EnhancedOpportunity] | None:
        """Return ranked opportunities, or None when Merkl gave us nothing."""
        opportunities = await self.fetcher.fetch_opportunities()
        if opportunities is None:
            return None

        results = await asyncio.gather(
            *[
                self._safe_enhance(opportunities.get(key, []), provider)
                for key, provider in self.providers.items()
            ],
        )
        ranked = rank(results)
        logger.info("Scanner ranked %d opportunities", len(ranked))
        return ranked

    async def _safe_enhance(
        self,
        opportunities: Sequence[Opportunity],
        provider: AprProvider,
    ) -> list[EnhancedOpportunity]:
        try:
            return await enhance(opportunities, provider)
        except Exception as exc:
            logger.error("Provider %s failed: %s", provider.name, exc)
            return [EnhancedOpportunity.from_opportunity(o, 0.0) for o in opportunities]
