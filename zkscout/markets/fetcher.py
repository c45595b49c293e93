"""Opportunity fetcher — pulls live pool opportunities from the Merkl API."""
from __future__ import annotations

import logging

import httpx

from zkscout.config import Settings, settings as default_settings
from zkscout.markets.sources.base import Opportunity
from zkscout.tools.web import fetch_json

logger = logging.getLogger(__name__)

# Merkl protocol id -> internal protocol key. Anything else is ignored.
PROTOCOL_MAP = {
    "maverick": "maverick",
    "syncswap": "syncswap",
    "koi": "koi",
    "pancakeswap-v3": "pancakeswap",
}

ProtocolOpportunities = dict[str, list[Opportunity]]


def partition_by_protocol(raw_opportunities: list) -> ProtocolOpportunities:
    """Group raw records by internal protocol key, keeping API order."""
    grouped: ProtocolOpportunities = {}
    for raw in raw_opportunities:
        try:
            protocol_id = raw["protocol"]["id"]
        except (KeyError, TypeError):
            logger.debug("Skipping opportunity without protocol: %r", raw)
            continue

        key = PROTOCOL_MAP.get(protocol_id)
        if key is None:
            logger.debug("Skipping unsupported protocol %s", protocol_id)
            continue

        try:
            opp = Opportunity.from_api(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Skipping malformed %s opportunity: %s", protocol_id, exc)
            continue
        grouped.setdefault(key, []).append(opp)
    return grouped


class OpportunityFetcher:
    """Fetches one page of opportunities for a chain and groups them."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._transport = transport

    async def fetch_opportunities(
        self,
        chain_id: int | None = None,
        status: str | None = None,
        action: str | None = None,
        items: int | None = None,
    ) -> ProtocolOpportunities | None:
        """Return opportunities keyed by protocol, or None if the API failed."""
        s = self.settings
        params = {
            "chainId": chain_id if chain_id is not None else s.chain_id,
            "action": action or s.opportunity_action,
            "status": status or s.opportunity_status,
            "items": items if items is not None else s.opportunity_items,
        }
        try:
            data = await fetch_json(
                f"{s.merkl_api_url}/opportunities",
                params=params,
                timeout=s.http_timeout_seconds,
                transport=self._transport,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Merkl opportunities fetch failed: %s", exc)
            return None

        if not isinstance(data, list):
            logger.warning("Merkl opportunities response is not a list: %r", type(data).__name__)
            return None

        grouped = partition_by_protocol(data)
        logger.info(
            "Merkl: %d opportunities, %d kept across %s",
            len(data),
            sum(len(v) for v in grouped.values()),
            ", ".join(sorted(grouped)) or "no protocols",
        )
        return grouped
