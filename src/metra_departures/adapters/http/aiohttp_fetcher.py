"""aiohttp implementation of the byte fetcher port."""

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

from metra_departures.adapters.http.api_request_logger import build_url_with_params, log_api_request
from metra_departures.domain.errors import TransportError
from metra_departures.domain.models.fetched_response import FetchedResponse
from metra_departures.domain.ports.byte_fetcher import ByteFetcher

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientSession

USER_AGENT = "MetraDepartures/1.0"


class AiohttpByteFetcher(ByteFetcher):
    """Fetches raw response bodies through a shared aiohttp session."""

    def __init__(self, session: "ClientSession") -> None:
        """Initialize with the aiohttp session used for all requests.

        Args:
            session: aiohttp ClientSession owned by the caller.
        """
        self._session = session

    async def fetch(
        self,
        url: str,
        params: dict[str, str] | None = None,
        timeout_seconds: float = 15.0,
    ) -> FetchedResponse:
        """GET ``url`` and return its status and body.

        Raises:
            TransportError: Connection failure or timeout.
        """
        log_api_request("GET", url, params)
        timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        try:
            async with self._session.get(
                url, params=params, timeout=timeout, headers={"User-Agent": USER_AGENT}
            ) as response:
                body = await response.read()
                return FetchedResponse(status=response.status, body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            # Exception text may embed the full URL, token included
            safe_url = build_url_with_params(url, params)
            logger.warning(f"Request to {safe_url} failed: {type(e).__name__}")
            raise TransportError(f"Request failed: {type(e).__name__}") from e
