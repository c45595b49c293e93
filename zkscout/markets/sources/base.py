"""Opportunity model and the base class for all base-APR providers."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import Any, Sequence

# Pool identifier (caller casing) -> base APR in percent
AprResult = dict[str, float]

# Keys of the raw Merkl record carried through untouched
_PAYLOAD_KEYS = ("tokens", "chain", "protocol", "aprRecord", "tvlRecord", "rewardsRecord")


@dataclass(frozen=True)
class Opportunity:
    """One yield-bearing pool position as reported by the aggregator."""

    chain_id: int
    protocol_id: str
    # Pool address, in whatever casing the aggregator uses
    identifier: str
    name: str
    deposit_url: str = ""
    # Boost APR in percent (incentives, not recomputed locally)
    apr: float = 0.0
    tvl: float = 0.0
    daily_rewards: float = 0.0
    status: str = ""
    action: str = ""
    id: str = ""
    tags: tuple[str, ...] = ()
    # Reward metadata, never destructured here
    payload: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_api(cls, raw: dict) -> Opportunity:
        """Build from a raw Merkl opportunity object.

        Raises KeyError/TypeError/ValueError when a required field is missing
        or malformed.
        """
        return cls(
            chain_id=int(raw.get("chainId") or 0),
            protocol_id=raw["protocol"]["id"],
            identifier=raw["identifier"],
            name=raw["name"],
            deposit_url=raw.get("depositUrl") or "",
            apr=float(raw.get("apr") or 0),
            tvl=float(raw.get("tvl") or 0),
            daily_rewards=float(raw.get("dailyRewards") or 0),
            status=raw.get("status") or "",
            action=raw.get("action") or "",
            id=str(raw.get("id") or ""),
            tags=tuple(raw.get("tags") or ()),
            payload={k: raw[k] for k in _PAYLOAD_KEYS if k in raw},
        )


@dataclass(frozen=True)
class EnhancedOpportunity(Opportunity):
    """Opportunity plus the locally computed base APR.

    ``base_apr`` is ``-1`` when the page scraper failed for this pool; it is
    kept as-is so the failure shows up in the ranking.
    """

    base_apr: float = 0.0

    @classmethod
    def from_opportunity(cls, opp: Opportunity, base_apr: float) -> EnhancedOpportunity:
        values = {f.name: getattr(opp, f.name) for f in fields(Opportunity)}
        return cls(**values, base_apr=float(base_apr))

    @property
    def total_apr(self) -> float:
        return self.apr + self.base_apr


class AprProvider(ABC):
    """ABC for all base-APR sources.

    Each implementation reads one data source (subgraph, ticker feed, web
    page) and returns an AprResult keyed by the identifiers it was given.
    Identifiers the source does not know about are left out.
    """

    name: str = "base"

    @abstractmethod
    async def compute_base_apr(self, identifiers: Sequence[str]) -> AprResult:
        """Return base APRs for the given pool identifiers."""
        ...


def match_original(identifiers: Sequence[str]) -> dict[str, list[str]]:
    """Map lowercased identifier -> caller-supplied spellings of it."""
    index: dict[str, list[str]] = {}
    for ident in identifiers:
        index.setdefault(ident.lower(), []).append(ident)
    return index
