"""Protocol for the periodic refresh worker."""

from typing import Protocol


class RefreshPollerProtocol(Protocol):
    """Protocol for running refresh cycles periodically and on demand."""

    async def start(self) -> None:
        """Start the refresh poller."""
        ...

    async def stop(self) -> None:
        """Stop the refresh poller."""
        ...

    def request_refresh(self) -> None:
        """Ask for a refresh as soon as the current one (if any) completes."""
        ...
