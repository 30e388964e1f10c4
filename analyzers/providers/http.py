"""
HTTP Analysis Provider - Client for a remotely hosted ML model.

The model is hosted elsewhere; this client only POSTs the
content and context as JSON and returns the decoded payload
for an analyzer to normalize:

    POST {endpoint}
    {"content": "...", "context": {...}}

Error mapping:
- 429            -> RateLimitError
- 5xx / network  -> ProviderUnavailableError (transient)
- other non-200  -> ProviderUnavailableError (permanent)
- client timeout -> ProviderTimeoutError
- invalid JSON   -> NormalizationError
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from ..exceptions import (
    NormalizationError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitError,
)


logger = logging.getLogger(__name__)


class HttpAnalysisProvider:
    """
    aiohttp client for one analysis endpoint.

    One session is created lazily and reused across calls.
    """

    DEFAULT_TIMEOUT = 30  # seconds

    def __init__(
        self,
        name: str,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.name = name
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        return self._session

    async def analyze(self, content: str, context: dict[str, Any]) -> dict[str, Any]:
        session = await self._get_session()
        payload = {"content": content, "context": context}

        try:
            async with session.post(self.endpoint, json=payload) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After", "60")
                    raise RateLimitError(
                        f"{self.name} rate limit exceeded",
                        analyzer_name=self.name,
                        retry_after_seconds=int(retry_after) if retry_after.isdigit() else None,
                    )

                if response.status != 200:
                    text = await response.text()
                    raise ProviderUnavailableError(
                        f"{self.name} provider error: {response.status}",
                        analyzer_name=self.name,
                        status_code=response.status,
                        is_permanent=response.status < 500,
                        details={"response": text[:500]},
                    )

                try:
                    data = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise NormalizationError(
                        f"{self.name} returned invalid JSON: {e}",
                        analyzer_name=self.name,
                    ) from e

        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"{self.name} did not respond within {self.timeout}s",
                analyzer_name=self.name,
            ) from e
        except aiohttp.ClientError as e:
            raise ProviderUnavailableError(
                f"Network error: {e}",
                analyzer_name=self.name,
            ) from e

        if not isinstance(data, dict):
            raise NormalizationError(
                f"{self.name} returned {type(data).__name__}, expected object",
                analyzer_name=self.name,
                raw_value=data,
            )

        return data

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


class HttpTrendFeed:
    """
    Read-only accessor for the trending-topics feed.

    The feed is refreshed on its own schedule by whoever owns it;
    this client only reads the current snapshot:

        GET {endpoint}
        {"trends": [{"phrase": ..., "volume": ..., "sentiment": ...}]}
    """

    DEFAULT_TIMEOUT = 10  # seconds

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=headers,
            )
        return self._session

    async def current_trends(self) -> list[dict[str, Any]]:
        session = await self._get_session()
        async with session.get(self.endpoint) as response:
            if response.status != 200:
                raise ProviderUnavailableError(
                    f"Trend feed error: {response.status}",
                    analyzer_name="trend_feed",
                    status_code=response.status,
                    is_permanent=response.status < 500,
                )
            data = await response.json()

        trends = data.get("trends", []) if isinstance(data, dict) else data
        if not isinstance(trends, list):
            raise NormalizationError(
                "Trend feed returned no trend list",
                analyzer_name="trend_feed",
                raw_value=data,
            )
        logger.debug(f"Trend feed returned {len(trends)} trends")
        return trends

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
