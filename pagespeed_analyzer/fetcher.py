from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from pagespeed_analyzer.config import PAGESPEED_TIMEOUT_SECONDS
from pagespeed_analyzer.errors import FetchFailure, ValidationError

logger = logging.getLogger(__name__)

PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
STRATEGIES = ("desktop", "mobile")


def _error_detail(exc: httpx.HTTPError) -> str:
    if not isinstance(exc, httpx.HTTPStatusError):
        return f"{type(exc).__name__}: {exc}"
    response = exc.response
    try:
        return f"status {response.status_code}: {response.json()}"
    except ValueError:
        return f"status {response.status_code}: {response.text[:500]}"


class PageSpeedFetcher:
    """Single-shot client for the PageSpeed Insights v5 API.

    The payload comes back exactly as Google sends it; shaping it for the
    model is the summarizer's job.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        endpoint: str = PAGESPEED_ENDPOINT,
        timeout: float = PAGESPEED_TIMEOUT_SECONDS,
    ):
        self.client = client
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout

    def build_params(self, url: str, strategy: str) -> dict[str, str]:
        params = {"url": url, "strategy": strategy}
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def fetch(self, url: str, strategy: str = "desktop") -> dict[str, Any]:
        clean = (url or "").strip()
        if not clean:
            raise ValidationError("URL is required")
        if strategy not in STRATEGIES:
            raise ValidationError(f"strategy must be one of: {', '.join(STRATEGIES)}")

        logger.info("Fetching PageSpeed Insights for: %s (%s)", clean, strategy)
        try:
            response = await self.client.get(
                self.endpoint,
                params=self.build_params(clean, strategy),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("PageSpeed API error: %s", _error_detail(exc))
            raise FetchFailure() from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error("PageSpeed API returned a non-JSON body: %s", response.text[:500])
            raise FetchFailure() from exc
