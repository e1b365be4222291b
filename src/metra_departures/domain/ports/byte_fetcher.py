"""HTTP transport port."""

from typing import Protocol

from metra_departures.domain.models.fetched_response import FetchedResponse


class ByteFetcher(Protocol):
    """Port for fetching raw bytes over HTTP."""

    async def fetch(
        self,
        url: str,
        params: dict[str, str] | None = None,
        timeout_seconds: float = 15.0,
    ) -> FetchedResponse:
        """GET ``url`` and return status and body.

        Raises TransportError when no response arrives within the timeout.
        """
        ...
