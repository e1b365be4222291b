"""Departures state dataclass."""

from dataclasses import dataclass, field

from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot


@dataclass
class DeparturesState:
    """Latest snapshot shown to the display, plus refresh bookkeeping."""

    snapshot: DeparturesSnapshot = field(default_factory=DeparturesSnapshot)
    refresh_count: int = 0
