"""Station, line and status catalog for TubeSpotter."""

import json
import logging
import math
from collections import abc
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .exceptions import LoadError, MalformedRecord
from .models import (
    Coordinate,
    LineAssociation,
    LineId,
    LineStatus,
    LineStatusRecord,
    ResolvedLine,
    Station,
)
from .resolver import resolve

logger = logging.getLogger(__name__)

RawRecord = Mapping[str, Any]

# Key spellings accepted for each field, in lookup order. The second spelling
# is the one used by the bundled station and line spreadsheets.
STATION_KEYS = {
    "name": ("name", "Station"),
    "latitude": ("latitude", "Latitude"),
    "longitude": ("longitude", "Longitude"),
}
ASSOCIATION_KEYS = {
    "line": ("line", "Tube Line"),
    "from": ("fromStation", "From Station"),
    "to": ("toStation", "To Station"),
}


def _require_mapping(raw: Any, kind: str, index: int) -> RawRecord:
    if not isinstance(raw, abc.Mapping):
        raise MalformedRecord(kind, index, f"record is not an object: {raw!r}")
    return raw


def _field(raw: RawRecord, keys: Tuple[str, ...], kind: str, index: int) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    raise MalformedRecord(kind, index, f"missing field '{keys[0]}'")


def _text(raw: RawRecord, keys: Tuple[str, ...], kind: str, index: int) -> str:
    value = _field(raw, keys, kind, index)
    if not isinstance(value, str):
        raise MalformedRecord(kind, index, f"{keys[0]} {value!r} is not a string")
    return value


def _parse_degrees(value: Any, name: str, index: int) -> float:
    try:
        degrees = float(value)
    except (TypeError, ValueError):
        raise MalformedRecord("station", index, f"{name} {value!r} is not numeric")
    if not math.isfinite(degrees):
        raise MalformedRecord("station", index, f"{name} {value!r} is not finite")
    return degrees


def parse_station(raw: Union[RawRecord, Station], index: int = 0) -> Station:
    """Build a Station from a raw record with string or numeric coordinates."""
    if isinstance(raw, Station):
        return raw
    raw = _require_mapping(raw, "station", index)
    name = _text(raw, STATION_KEYS["name"], "station", index).strip()
    if not name:
        raise MalformedRecord("station", index, "empty station name")
    latitude = _parse_degrees(_field(raw, STATION_KEYS["latitude"], "station", index), "latitude", index)
    longitude = _parse_degrees(_field(raw, STATION_KEYS["longitude"], "station", index), "longitude", index)
    return Station(name=name, coordinate=Coordinate(latitude, longitude))


def parse_association(raw: Union[RawRecord, LineAssociation], index: int = 0) -> LineAssociation:
    """Build a LineAssociation, rejecting lines that are not a known LineId."""
    if isinstance(raw, LineAssociation):
        return raw
    raw = _require_mapping(raw, "association", index)
    line_name = _text(raw, ASSOCIATION_KEYS["line"], "association", index)
    try:
        line = LineId.from_display_name(line_name)
    except ValueError:
        raise MalformedRecord("association", index, f"unknown line {line_name!r}")
    return LineAssociation(
        line=line,
        from_station=_text(raw, ASSOCIATION_KEYS["from"], "association", index),
        to_station=_text(raw, ASSOCIATION_KEYS["to"], "association", index),
    )


def _parse_severity(value: Any, index: int) -> int:
    if isinstance(value, bool):
        raise MalformedRecord("status", index, f"severity {value!r} is not an integer")
    if isinstance(value, float) and not value.is_integer():
        raise MalformedRecord("status", index, f"severity {value!r} is not an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedRecord("status", index, f"severity {value!r} is not an integer")


def parse_status_record(raw: Union[RawRecord, LineStatusRecord], index: int = 0) -> LineStatusRecord:
    """
    Build a LineStatusRecord from a feed entry.

    Status entries may use either the short keys (severity,
    severityDescription) or the live feed keys (statusSeverity,
    statusSeverityDescription).
    """
    if isinstance(raw, LineStatusRecord):
        return raw
    raw = _require_mapping(raw, "status", index)
    record_id = raw.get("id")
    if not record_id or not isinstance(record_id, str):
        raise MalformedRecord("status", index, f"missing or invalid line id {record_id!r}")

    entries = raw.get("lineStatuses") or []
    if not isinstance(entries, list):
        raise MalformedRecord("status", index, "lineStatuses is not a list")

    statuses: List[LineStatus] = []
    for entry in entries:
        entry = _require_mapping(entry, "status", index)
        if "statusSeverity" in entry:
            severity = entry["statusSeverity"]
            description = entry.get("statusSeverityDescription", "")
        elif "severity" in entry:
            severity = entry["severity"]
            description = entry.get("severityDescription", "")
        else:
            raise MalformedRecord("status", index, "status entry without severity")
        statuses.append(LineStatus(_parse_severity(severity, index), description or ""))

    return LineStatusRecord(
        id=record_id,
        name=raw.get("name", "") or "",
        mode_name=raw.get("modeName", "") or "",
        line_statuses=tuple(statuses),
    )


def read_records(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read a list of records from a JSON array or a CSV table.

    CSV columns are read as strings; coordinate parsing is left to the
    catalog so that bad values fail validation with a record index.

    Raises:
        LoadError: If the file is missing, unreadable or can't be parsed.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".json"):
        raise LoadError(f"Unsupported data file type: {path}")

    try:
        if suffix == ".csv":
            frame = pd.read_csv(path, dtype=str, keep_default_na=False)
            return frame.to_dict(orient="records")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        logger.error(f"Could not read {path}: {e}")
        raise LoadError(f"Could not read {path}: {e}") from e

    if not isinstance(data, list):
        raise LoadError(f"{path} does not contain a JSON array")
    return data


class Catalog:
    """
    Validated, read-only tables of stations, line associations and line statuses.

    Build one with Catalog.load() or Catalog.from_files(). Once built, a
    catalog is never mutated, so it can be shared between readers.
    """

    def __init__(
        self,
        stations: Tuple[Station, ...],
        associations: Tuple[LineAssociation, ...],
        statuses: Mapping[str, LineStatusRecord],
    ):
        self._stations = stations
        self._associations = associations
        self._stations_by_name = MappingProxyType({s.name: s for s in stations})
        self._statuses = MappingProxyType(dict(statuses))

    @classmethod
    def load(
        cls,
        stations: Iterable[Union[RawRecord, Station]],
        associations: Iterable[Union[RawRecord, LineAssociation]],
        status_feed: Iterable[Union[RawRecord, LineStatusRecord]] = (),
    ) -> "Catalog":
        """
        Validate raw records and build a catalog.

        Args:
            stations: Station records ({name, latitude, longitude}).
            associations: Association records ({line, fromStation, toStation}).
            status_feed: Line status feed records.

        Returns:
            Catalog instance.

        Raises:
            MalformedRecord: If any record fails validation.
        """
        parsed_stations: List[Station] = []
        seen = set()
        for i, raw in enumerate(stations):
            station = parse_station(raw, i)
            if station.name in seen:
                raise MalformedRecord("station", i, f"duplicate station name {station.name!r}")
            seen.add(station.name)
            parsed_stations.append(station)

        parsed_associations = tuple(parse_association(raw, i) for i, raw in enumerate(associations))

        catalog = cls(tuple(parsed_stations), parsed_associations, _index_feed(status_feed))
        logger.info(
            f"Loaded {len(catalog.stations)} stations, {len(catalog.associations)} "
            f"line associations and {len(catalog.statuses)} line statuses"
        )
        return catalog

    @classmethod
    def from_files(
        cls,
        stations_path: Union[str, Path],
        associations_path: Union[str, Path],
        status_feed: Iterable[Union[RawRecord, LineStatusRecord]] = (),
    ) -> "Catalog":
        """Load stations and associations from local JSON or CSV files."""
        logger.info(f"Loading stations from {stations_path} and lines from {associations_path}")
        return cls.load(read_records(stations_path), read_records(associations_path), status_feed)

    def with_statuses(self, status_feed: Iterable[Union[RawRecord, LineStatusRecord]]) -> "Catalog":
        """Return a catalog with the same stations and a new status feed."""
        catalog = Catalog(self._stations, self._associations, _index_feed(status_feed))
        logger.info(f"Refreshed catalog with {len(catalog.statuses)} line statuses")
        return catalog

    @property
    def stations(self) -> Tuple[Station, ...]:
        return self._stations

    @property
    def associations(self) -> Tuple[LineAssociation, ...]:
        return self._associations

    @property
    def statuses(self) -> Mapping[str, LineStatusRecord]:
        """Status feed records indexed by feed id."""
        return self._statuses

    def get_station(self, name: str) -> Station:
        """Get station by exact name."""
        if name not in self._stations_by_name:
            raise ValueError(f"Station {name} not found")
        return self._stations_by_name[name]

    def find_stations_by_name(self, name: str) -> List[Station]:
        """Find stations by name (partial match)."""
        name_lower = name.lower()
        return [s for s in self._stations if name_lower in s.name.lower()]

    def status_record(self, feed_id: str) -> Optional[LineStatusRecord]:
        return self._statuses.get(feed_id)

    def resolve(self, station_name: str) -> List[ResolvedLine]:
        """Lines serving a station with their current status."""
        return resolve(station_name, self._associations, self._statuses)


def _index_feed(status_feed: Iterable[Union[RawRecord, LineStatusRecord]]) -> Dict[str, LineStatusRecord]:
    index: Dict[str, LineStatusRecord] = {}
    for i, raw in enumerate(status_feed):
        record = parse_status_record(raw, i)
        if record.id in index:
            logger.warning(f"Duplicate status record for {record.id}, keeping the first")
            continue
        index[record.id] = record
    return index
