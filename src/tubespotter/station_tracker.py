"""Main TubeSpotter station tracker class."""

import logging
from pathlib import Path
from typing import List, Optional, Set, Union

from .catalog import Catalog
from .models import Coordinate, MarkerLine, MarkerUpdate, ResolvedLine, StationMarker
from .proximity import NEARBY_RADIUS_M, RESET_DISTANCE_M, ProximityFilter
from .tfl_client import TfLClient

logger = logging.getLogger(__name__)


class StationTracker:
    """
    Decides which station markers a renderer should show and what to draw on them.

    This class provides methods to:
    - Load stations, line associations and live line statuses
    - Feed location fixes and get the markers to add or remove
    - Get the lines and line statuses for a station marker
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        client: Optional[TfLClient] = None,
        reset_distance_m: float = RESET_DISTANCE_M,
        radius_m: float = NEARBY_RADIUS_M,
    ):
        """
        Initialize the tracker.

        Args:
            catalog: Preloaded catalog. If None, call load_catalog_from_files()
                     before feeding locations.
            client: TfL client used to fetch line statuses.
            reset_distance_m: Movement needed before nearby stations are recomputed.
            radius_m: Distance under which a station is nearby.
        """
        self.client = client or TfLClient()
        self._catalog = catalog
        self.proximity = ProximityFilter(
            catalog.stations if catalog else (),
            reset_distance_m=reset_distance_m,
            radius_m=radius_m,
        )
        self._placed: Set[str] = set()
        # Placed markers whose station left the catalog; reported on the next update
        self._dropped: Set[str] = set()

    @property
    def catalog(self) -> Catalog:
        if self._catalog is None:
            raise RuntimeError("Catalog not loaded; call load_catalog_from_files() first")
        return self._catalog

    @catalog.setter
    def catalog(self, catalog: Catalog) -> None:
        names = {s.name for s in catalog.stations}
        restored = self._dropped & names
        self._placed |= restored
        self._dropped -= restored
        dropped = self._placed - names
        if dropped:
            logger.info(f"Dropping {len(dropped)} markers for stations no longer in the catalog")
            self._placed -= dropped
            self._dropped |= dropped
        self._catalog = catalog
        self.proximity.set_stations(catalog.stations)
        # Recompute nearby stations against the new catalog on the next fix
        self.proximity.reset()

    @property
    def placed_markers(self) -> List[str]:
        """Names of stations that currently have a marker."""
        return sorted(self._placed)

    def load_catalog_from_files(
        self,
        stations_path: Union[str, Path],
        associations_path: Union[str, Path],
    ) -> Catalog:
        """
        Fetch live statuses and load stations and line associations from files.

        Args:
            stations_path: JSON or CSV station list.
            associations_path: JSON or CSV station/line associations.

        Returns:
            The loaded catalog.

        Raises:
            LoadError: If the feed or either file can't be loaded. The load can
                       be retried as a whole.
        """
        try:
            statuses = self.client.fetch_line_statuses()
            catalog = Catalog.from_files(stations_path, associations_path, statuses)
        except Exception as e:
            logger.error(f"Content load failed: {e}")
            raise

        self.catalog = catalog
        return catalog

    def refresh_statuses(self) -> Catalog:
        """Refetch the status feed, keeping stations and associations."""
        statuses = self.client.fetch_line_statuses()
        self._catalog = self.catalog.with_statuses(statuses)
        return self._catalog

    def update_location(self, latitude: float, longitude: float) -> MarkerUpdate:
        """
        Feed a location fix.

        Args:
            latitude: User latitude in decimal degrees.
            longitude: User longitude in decimal degrees.

        Returns:
            MarkerUpdate. When the fix is accepted, added and removed name the
            markers to place and drop so that exactly one marker exists per
            nearby station.
        """
        if self._catalog is None:
            raise RuntimeError("Catalog not loaded; call load_catalog_from_files() first")
        changed, nearby = self.proximity.update_location(Coordinate(latitude, longitude))
        if not changed:
            return MarkerUpdate(changed=False, nearby=nearby)

        names = {s.name for s in nearby}
        added = tuple(sorted(names - self._placed))
        removed = tuple(sorted((self._placed - names) | self._dropped))
        self._placed = names
        self._dropped = set()

        if added or removed:
            logger.info(f"Markers: +{len(added)} -{len(removed)} ({len(names)} nearby)")
        return MarkerUpdate(changed=True, nearby=nearby, added=added, removed=removed)

    def get_station_lines(self, station_name: str) -> List[ResolvedLine]:
        """
        Get the lines serving a station and their status.

        Args:
            station_name: Exact station name.

        Returns:
            List of ResolvedLine sorted by line name. Status is None for lines
            the feed doesn't cover.
        """
        return self.catalog.resolve(station_name)

    def get_marker(self, station_name: str) -> StationMarker:
        """
        Get the marker payload for one station.

        Raises:
            ValueError: If the station isn't in the catalog.
        """
        station = self.catalog.get_station(station_name)
        lines = []
        for line, status in self.get_station_lines(station_name):
            record = self.catalog.status_record(line.status_id)
            current = record.current if record is not None else None
            description = current.severity_description if current is not None else None
            lines.append(MarkerLine(line, status, description or None))
        return StationMarker(station=station, lines=lines)

    def get_markers(self) -> List[StationMarker]:
        """Marker payloads for every placed station, sorted by name."""
        return [self.get_marker(name) for name in sorted(self._placed)]

    def reset(self) -> None:
        """Forget placed markers and the last location, e.g. after a session restart."""
        self._placed.clear()
        self._dropped.clear()
        self.proximity.reset()

    def cleanup(self) -> None:
        """Release resources and clear caches."""
        if self.client:
            self.client.clear_cache()
        logger.info("Cleaned up tracker resources")
