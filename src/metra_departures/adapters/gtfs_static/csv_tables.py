"""Reading of the flat GTFS tables.

Files are UTF-8 CSV with a header line, possibly prefixed by a byte-order mark.
Fields follow RFC 4180 quoting (commas inside double quotes, ``""`` escapes).
"""

import csv
from collections.abc import Iterator, Sequence
from pathlib import Path

from metra_departures.domain.errors import MissingColumnsError, UnreadableTableError

TRIPS = "trips.txt"
STOP_TIMES = "stop_times.txt"
CALENDAR = "calendar.txt"
CALENDAR_DATES = "calendar_dates.txt"
STOPS = "stops.txt"
ROUTES = "routes.txt"

REQUIRED_FILES: tuple[str, ...] = (TRIPS, STOP_TIMES, CALENDAR, CALENDAR_DATES, STOPS, ROUTES)


def iter_table(
    dataset_path: Path,
    filename: str,
    required: Sequence[str],
    optional: Sequence[str] = (),
) -> Iterator[dict[str, str]]:
    """Yield each data row of a table as ``{column: value}`` for the requested columns.

    Rows too short to hold every required column, and blank rows, are skipped.
    Optional columns missing from the header or the row come back as ``""``.

    Raises:
        MissingColumnsError: A required column is absent from the header.
        UnreadableTableError: The file is missing, not UTF-8, or not valid CSV.
    """
    try:
        yield from _read_rows(dataset_path / filename, filename, required, optional)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise UnreadableTableError(filename, f"Could not read {filename}: {e}") from e


def _read_rows(
    path: Path,
    filename: str,
    required: Sequence[str],
    optional: Sequence[str],
) -> Iterator[dict[str, str]]:
    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.reader(f, skipinitialspace=True)
        header = next(reader, None)
        if header is None:
            raise MissingColumnsError(filename)
        positions = {name.strip(): index for index, name in enumerate(header)}

        missing = [name for name in required if name not in positions]
        if missing:
            raise MissingColumnsError(filename)

        columns = [(name, positions[name]) for name in required]
        optional_columns = [(name, positions.get(name)) for name in optional]
        min_length = max(index for _, index in columns) + 1

        for row in reader:
            if len(row) < min_length:
                continue
            values = {name: row[index].strip() for name, index in columns}
            for name, index in optional_columns:
                values[name] = row[index].strip() if index is not None and index < len(row) else ""
            yield values
