"""SyncSwap base APR, scraped from the pool pages.

SyncSwap publishes no API for pool fee APRs, so each pool page is rendered in
headless Chromium and the "Fee APR (24h)" figure is read off the DOM. This
depends on SyncSwap's MUI class names staying put.

One browser and one page serve the whole batch; addresses are visited one at
a time.
"""
from __future__ import annotations

import logging
import re
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Callable, Sequence

from playwright.async_api import Browser, Page, async_playwright

from zkscout.config import Settings, settings as default_settings
from zkscout.markets.sources.base import AprProvider, AprResult

logger = logging.getLogger(__name__)

# Marks a pool whose page could not be read; distinct from a real 0%
SCRAPE_FAILED = -1.0

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
VIEWPORT = {"width": 1280, "height": 800}

TYPOGRAPHY_SELECTOR = ".MuiTypography-root"
FEE_APR_LABEL = re.compile(r"^\s*Fee APR \(24h\)\s*$")
CONTAINER_XPATH = "xpath=ancestor-or-self::*[contains(concat(' ', normalize-space(@class), ' '), ' col ')][1]"
VALUE_SELECTOR = ".fade-text"

BrowserLauncher = Callable[[], AbstractAsyncContextManager[Browser]]


class ScrapeError(RuntimeError):
    pass


def parse_apr_text(text: str | None) -> float:
    """'12.34%' -> 12.34. Raises ScrapeError on empty or non-numeric text."""
    if not text or not text.strip():
        raise ScrapeError("no text content found")
    cleaned = text.strip().removesuffix("%").strip()
    try:
        return float(cleaned)
    except ValueError as exc:
        raise ScrapeError(f"failed to parse value {text!r}") from exc


@asynccontextmanager
async def launch_browser(headless: bool = True) -> AsyncIterator[Browser]:
    """Start Playwright and yield a Chromium browser."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=headless, args=BROWSER_ARGS)
        yield browser


class SyncSwapAprProvider(AprProvider):
    """Reads the 24h fee APR from https://syncswap.xyz/pool/<address>."""

    name = "syncswap"

    def __init__(
        self,
        settings: Settings | None = None,
        launcher: BrowserLauncher | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._launcher = launcher or (lambda: launch_browser(headless=self.settings.browser_headless))

    async def compute_base_apr(self, identifiers: Sequence[str]) -> AprResult:
        if not identifiers:
            return {}

        results: AprResult = {}
        # Launch errors propagate: the whole provider is unavailable this run
        async with self._launcher() as browser:
            try:
                page = await browser.new_page(viewport=VIEWPORT)
                for address in identifiers:
                    try:
                        results[address] = await self._scrape_pool(page, address)
                        logger.info("SyncSwap fee APR for %s: %s%%", address, results[address])
                    except Exception as exc:
                        logger.warning("SyncSwap scrape failed for %s: %s", address, exc)
                        results[address] = SCRAPE_FAILED
            finally:
                await browser.close()

        failed = sum(1 for v in results.values() if v == SCRAPE_FAILED)
        logger.info("syncswap: scraped %d pools, %d failed", len(results), failed)
        return results

    async def _scrape_pool(self, page: Page, address: str) -> float:
        await page.goto(
            self.settings.syncswap_pool_url.format(address=address),
            wait_until="networkidle",
            timeout=self.settings.scrape_navigation_timeout_ms,
        )
        await page.wait_for_selector(
            TYPOGRAPHY_SELECTOR,
            timeout=self.settings.scrape_selector_timeout_ms,
        )
        await page.wait_for_timeout(self.settings.scrape_settle_ms)
        return await self._read_fee_apr(page)

    async def _read_fee_apr(self, page: Page) -> float:
        label = page.locator(TYPOGRAPHY_SELECTOR).filter(has_text=FEE_APR_LABEL)
        if await label.count() == 0:
            raise ScrapeError("Fee APR label not found")

        container = label.last.locator(CONTAINER_XPATH)
        if await container.count() == 0:
            raise ScrapeError("container not found")

        value = container.locator(VALUE_SELECTOR)
        if await value.count() == 0:
            raise ScrapeError("value element not found")

        return parse_apr_text(await value.first.text_content())
