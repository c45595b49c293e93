from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Merkl aggregator ──────────────────────────────────────────────────────
    merkl_api_url: str = "https://api.merkl.xyz/v4"
    # zkSync Era mainnet
    chain_id: int = 324
    opportunity_status: str = "LIVE"
    opportunity_action: str = "POOL"
    opportunity_items: int = 100

    # ── Subgraphs ─────────────────────────────────────────────────────────────
    pancakeswap_subgraph_url: str = (
        "https://api.studio.thegraph.com/query/45376/exchange-v3-zksync/version/latest"
    )
    graph_gateway_url: str = "https://gateway.thegraph.com/api"
    graph_api_key: str = ""
    koi_subgraph_id: str = "3gLgwpvmNybVfKeVLKcFLnpLvbtiwTQ4rLceVP7gWcjT"

    # ── Maverick tickers ──────────────────────────────────────────────────────
    maverick_ticker_url: str = "https://app.mav.xyz/api/v2/api/latest/tickers"
    # Percent, i.e. 0.02 means a 0.02% fee per swap
    maverick_fee_tier: float = 0.02

    # ── SyncSwap scraping ─────────────────────────────────────────────────────
    syncswap_pool_url: str = "https://syncswap.xyz/pool/{address}"
    scrape_navigation_timeout_ms: int = 60_000
    scrape_selector_timeout_ms: int = 30_000
    # React keeps rendering after the first typography node shows up
    scrape_settle_ms: int = 5_000
    browser_headless: bool = True

    # ── Runtime ───────────────────────────────────────────────────────────────
    http_timeout_seconds: float = 15.0
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return str(v).upper()

    @property
    def koi_subgraph_url(self) -> str:
        return f"{self.graph_gateway_url}/{self.graph_api_key}/subgraphs/id/{self.koi_subgraph_id}"


# Singleton — import and use `settings` everywhere
settings = Settings()
