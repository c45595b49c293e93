"""zkscout entrypoint.

Runs a single scan:
  1. Fetch live pool opportunities for zkSync from Merkl
  2. Compute base APRs per protocol, concurrently
  3. Print opportunities ranked by total APR
"""
from __future__ import annotations

import asyncio
import logging
import sys

from rich.logging import RichHandler

from zkscout.config import settings
from zkscout.markets.scanner import OpportunityScanner
from zkscout.markets.scorer import render

logger = logging.getLogger("zkscout")


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


async def run(scanner: OpportunityScanner | None = None) -> int:
    """Run one scan and render it. Returns the process exit status."""
    scanner = scanner or OpportunityScanner()
    ranked = await scanner.scan()
    if ranked is None:
        logger.error("No opportunities fetched from Merkl, skipping this run")
        return 1
    render(ranked)
    return 0


def main() -> None:
    setup_logging()
    logger.info(
        "zkscout: chain %d, %s/%s opportunities",
        settings.chain_id,
        settings.opportunity_action,
        settings.opportunity_status,
    )
    try:
        code = asyncio.run(run())
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception:
        logger.exception("Runtime error")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
