"""Fetched HTTP response domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedResponse:
    """Status code and raw body of a completed HTTP request."""

    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
