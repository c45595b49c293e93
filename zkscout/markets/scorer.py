"""Ranking and report formatting.

Total APR = base APR (fees, computed locally) + boost APR (Merkl incentives).
Opportunities are ranked by total APR, highest first.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from rich.console import Console
from rich.text import Text

from zkscout.markets.sources.base import EnhancedOpportunity

NO_DEPOSIT_LINK = "No deposit link"


def total_apr(opp: EnhancedOpportunity) -> float:
    return opp.apr + opp.base_apr


def rank(enhanced_lists: Iterable[Sequence[EnhancedOpportunity]]) -> list[EnhancedOpportunity]:
    """Merge all lists and sort best-first. Ties keep their input order."""
    merged = [opp for batch in enhanced_lists for opp in batch]
    return sorted(merged, key=total_apr, reverse=True)


def _summary(position: int, opp: EnhancedOpportunity) -> str:
    return (
        f"{position}. {opp.name} | {total_apr(opp):.2f}% "
        f"(Base: {opp.base_apr:.2f}% + Boost: {opp.apr:.2f}%)"
    )


def format_line(position: int, opp: EnhancedOpportunity) -> str:
    link = f"Deposit: {opp.deposit_url}" if opp.deposit_url else NO_DEPOSIT_LINK
    return f"{_summary(position, opp)} | {link}"


def format_report(ranked: Sequence[EnhancedOpportunity]) -> list[str]:
    lines = [f"Found {len(ranked)} opportunities sorted by total APR:"]
    lines.extend(format_line(i, opp) for i, opp in enumerate(ranked, start=1))
    return lines


def render(ranked: Sequence[EnhancedOpportunity], console: Console | None = None) -> None:
    """Print format_report(ranked); deposit URLs become terminal hyperlinks."""
    console = console or Console()
    header, *lines = format_report(ranked)
    console.print()
    console.print(Text(header, style="bold"))
    for opp, raw in zip(ranked, lines):
        line = Text(raw, style="red" if opp.base_apr < 0 else "")
        if opp.deposit_url:
            line.stylize(f"link {opp.deposit_url}", len(raw) - len(opp.deposit_url))
        else:
            line.stylize("dim", len(raw) - len(NO_DEPOSIT_LINK))
        console.print(line)
