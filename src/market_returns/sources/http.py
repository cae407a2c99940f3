"""Shared async HTTP client for the price sources."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from aiolimiter import AsyncLimiter

from market_returns.core.exceptions import SourceUnavailable
from market_returns.core.models import SourceTag

logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 200


def make_limiter(requests_per_second: float) -> AsyncLimiter:
    """Token bucket allowing ``requests_per_second`` (may be fractional)."""
    if requests_per_second >= 1:
        return AsyncLimiter(max_rate=requests_per_second, time_period=1.0)
    return AsyncLimiter(max_rate=1, time_period=1.0 / requests_per_second)


class SourceClient:
    """Thin wrapper over ``httpx.AsyncClient`` that speaks SourceUnavailable.

    One request per call: no retries. Any transport error or non-200 status
    becomes ``SourceUnavailable`` carrying the provider tag and series id.

    Use via ``async with SourceClient(...) as client:``.
    """

    def __init__(
        self,
        timeout: float | None = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    async def __aenter__(self) -> SourceClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get_json(
        self,
        url: str,
        *,
        source: SourceTag,
        series_id: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        limiter: AsyncLimiter | None = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            SourceUnavailable: transport error, non-200 status, or a body
                that is not valid JSON.
        """
        context = {"source": str(source), "series_id": series_id, "url": url}

        if limiter is not None:
            await limiter.acquire()

        try:
            response = await self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise SourceUnavailable(
                f"{source} request failed for {series_id}: {e}",
                context={**context, "status_code": None},
            ) from e

        if response.status_code != 200:
            raise SourceUnavailable(
                f"{source} API error: HTTP {response.status_code} for {series_id}",
                context={
                    **context,
                    "status_code": response.status_code,
                    "response_body": response.text[:_ERROR_BODY_LIMIT],
                },
            )

        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailable(
                f"{source} returned malformed JSON for {series_id}",
                context={**context, "status_code": response.status_code},
            ) from e
