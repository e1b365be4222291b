"""Train departure domain model."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TrainDeparture:
    """A single upcoming departure, either live or from the static schedule."""

    id: str  # Feed entity id for live departures, trip id for scheduled ones
    trip_id: str
    scheduled_time: datetime
    delay_seconds: int
    minutes_until: int
    is_realtime: bool

    @property
    def effective_time(self) -> datetime:
        """Scheduled time shifted by the reported delay."""
        return self.scheduled_time + timedelta(seconds=self.delay_seconds)

    @property
    def train_number(self) -> str:
        """Run number from the trip id (``BNSF_BN1200_V4_A`` -> ``#1200``)."""
        for component in self.trip_id.split("_"):
            digits = "".join(c for c in component if c.isdigit())
            if len(digits) >= 3:
                return f"#{digits}"
        return self.trip_id
