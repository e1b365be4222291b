"""HTTP transport adapters."""

from metra_departures.adapters.http.aiohttp_fetcher import AiohttpByteFetcher

__all__ = ["AiohttpByteFetcher"]
