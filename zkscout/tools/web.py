"""Thin httpx helpers shared by the fetcher and the HTTP-backed APR providers."""
from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "zkscout/0.1"


async def fetch_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    timeout: float = 15,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET a URL and parse the body as JSON."""
    async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
        resp = await client.get(url, params=params, headers={"User-Agent": USER_AGENT})
        resp.raise_for_status()
        return resp.json()


async def post_json(
    url: str,
    payload: dict,
    *,
    timeout: float = 15,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """POST JSON to a URL and return the parsed response."""
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        resp = await client.post(url, json=payload, headers={"User-Agent": USER_AGENT})
        resp.raise_for_status()
        logger.debug("POST %s -> %s", url, resp.status_code)
        return resp.json()
