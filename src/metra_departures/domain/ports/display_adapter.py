"""Display adapter port."""

from abc import ABC, abstractmethod

from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot


class DisplayAdapter(ABC):
    """Port for displaying departure information to users."""

    @abstractmethod
    async def display_departures(self, snapshot: DeparturesSnapshot) -> None:
        """Display the latest departures snapshot."""
        ...

    @abstractmethod
    async def start(self) -> None:
        """Start the display adapter."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the display adapter."""
        ...
