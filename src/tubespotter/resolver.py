"""Joins stations to the lines serving them and the lines' live status."""

import logging
from collections import abc
from typing import Iterable, List, Mapping, Optional, Union

from .models import (
    LineAssociation,
    LineId,
    LineStatusRecord,
    ResolvedLine,
)

logger = logging.getLogger(__name__)

StatusSource = Union[Mapping[str, LineStatusRecord], Iterable[LineStatusRecord]]


def derive_status_id(line: LineId) -> str:
    """
    Derive the status feed identifier for a line from its display name.

    "Hammersmith & City" -> "hammersmith-city",
    "London Overground" -> "london-overground".
    """
    return line.display_name.lower().replace(" & ", "-").replace(" ", "-")


def lines_for_station(station_name: str, associations: Iterable[LineAssociation]) -> List[LineId]:
    """
    Distinct lines that list the station as their from-station.

    To-station matches are not counted.

    Returns:
        LineIds sorted by display name.
    """
    lines = {a.line for a in associations if a.from_station == station_name}
    return sorted(lines, key=lambda line: line.display_name)


def _index_statuses(statuses: StatusSource) -> Mapping[str, LineStatusRecord]:
    if isinstance(statuses, abc.Mapping):
        return statuses
    index = {}
    for record in statuses:
        # Keep the first record for an id, as a linear search would
        index.setdefault(record.id, record)
    return index


def resolve(
    station_name: str,
    associations: Iterable[LineAssociation],
    statuses: StatusSource,
) -> List[ResolvedLine]:
    """
    Resolve the lines serving a station and their current status.

    Args:
        station_name: Exact station name.
        associations: Station/line associations to search.
        statuses: Status feed records, either indexed by id or as a sequence.

    Returns:
        One ResolvedLine per distinct line, sorted by display name. A line
        missing from the feed, or whose record has no status entries,
        resolves with status None. Unknown stations resolve to [].
    """
    index = _index_statuses(statuses)
    result: List[ResolvedLine] = []

    for line in lines_for_station(station_name, associations):
        record: Optional[LineStatusRecord] = index.get(line.status_id)
        current = record.current if record is not None else None
        if current is None:
            logger.debug(f"No status for {line.display_name} at {station_name}")
            result.append(ResolvedLine(line, None))
        else:
            result.append(ResolvedLine(line, current.status))

    return result
