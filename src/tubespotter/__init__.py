"""TubeSpotter - Nearby London station and line-status engine for AR markers."""

__version__ = "0.1.0"

from .models import (
    Coordinate,
    LineAssociation,
    LineId,
    LineStatus,
    LineStatusRecord,
    MarkerLine,
    MarkerUpdate,
    ResolvedLine,
    Station,
    StationMarker,
    Status,
    TransportMode,
)
from .exceptions import FetchError, LoadError, MalformedRecord
from .catalog import Catalog
from .status import classify
from .proximity import ProximityFilter
from .resolver import derive_status_id, resolve
from .tfl_client import TfLClient
from .station_tracker import StationTracker

__all__ = [
    "StationTracker",
    "Catalog",
    "ProximityFilter",
    "TfLClient",
    "classify",
    "resolve",
    "derive_status_id",
    "Coordinate",
    "Station",
    "LineAssociation",
    "LineId",
    "LineStatus",
    "LineStatusRecord",
    "TransportMode",
    "Status",
    "ResolvedLine",
    "MarkerLine",
    "StationMarker",
    "MarkerUpdate",
    "LoadError",
    "MalformedRecord",
    "FetchError",
]
