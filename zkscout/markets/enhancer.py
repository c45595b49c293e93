"""Attach locally computed base APRs to a protocol's opportunities."""
from __future__ import annotations

import logging
from typing import Sequence

from zkscout.markets.sources.base import AprProvider, EnhancedOpportunity, Opportunity

logger = logging.getLogger(__name__)


async def enhance(
    opportunities: Sequence[Opportunity] | None,
    provider: AprProvider,
) -> list[EnhancedOpportunity]:
    """Fetch base APRs for all opportunities with a single provider call.

    Pools missing from the provider's result get 0. Negative sentinels are
    passed through unchanged.
    """
    if not opportunities:
        return []

    identifiers = [o.identifier for o in opportunities]
    aprs = await provider.compute_base_apr(identifiers)
    logger.debug("%s: %d/%d pools have a base APR", provider.name, len(aprs), len(identifiers))
    return [EnhancedOpportunity.from_opportunity(o, aprs.get(o.identifier, 0.0)) for o in opportunities]
