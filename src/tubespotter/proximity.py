"""Decides which stations are close enough to the user to carry a marker."""

import logging
from typing import FrozenSet, Iterable, Optional, Tuple

from .geo import distance_between
from .models import Coordinate, Station

logger = logging.getLogger(__name__)

# Movement below this, since the last accepted fix, is treated as GPS jitter.
RESET_DISTANCE_M = 30.0
# Stations strictly closer than this are nearby.
NEARBY_RADIUS_M = 800.0


class ProximityFilter:
    """
    Tracks the set of stations near the user.

    Membership is only recomputed when the user has moved more than
    reset_distance_m from the last accepted location, so markers don't churn
    on small GPS corrections. Not thread-safe: callers must serialise
    update_location() calls.
    """

    def __init__(
        self,
        stations: Iterable[Station],
        reset_distance_m: float = RESET_DISTANCE_M,
        radius_m: float = NEARBY_RADIUS_M,
    ):
        self.stations: Tuple[Station, ...] = tuple(stations)
        self.reset_distance_m = reset_distance_m
        self.radius_m = radius_m
        self._last_reset: Optional[Coordinate] = None
        self._nearby: FrozenSet[Station] = frozenset()

    @property
    def last_reset_location(self) -> Optional[Coordinate]:
        return self._last_reset

    @property
    def nearby(self) -> FrozenSet[Station]:
        return self._nearby

    def set_stations(self, stations: Iterable[Station]) -> None:
        """Replace the station source. Takes effect on the next accepted update."""
        self.stations = tuple(stations)

    def update_location(self, current: Coordinate) -> Tuple[bool, FrozenSet[Station]]:
        """
        Feed a location fix.

        Args:
            current: The user's location.

        Returns:
            (changed, nearby). changed is True when the fix was accepted and
            membership recomputed; otherwise the previous set is returned.
        """
        if self._last_reset is not None:
            moved = distance_between(current, self._last_reset)
            if moved <= self.reset_distance_m:
                return False, self._nearby
            logger.debug(f"Moved {moved:.1f}m since last reset")

        self._last_reset = current
        self._nearby = frozenset(
            s for s in self.stations
            if distance_between(current, s.coordinate) < self.radius_m
        )
        logger.debug(f"{len(self._nearby)} stations within {self.radius_m:.0f}m")
        return True, self._nearby

    def reset(self) -> None:
        """Forget the last location and membership."""
        self._last_reset = None
        self._nearby = frozenset()
