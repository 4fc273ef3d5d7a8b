"""Data models for TubeSpotter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple


class Status(Enum):
    """Operational state of a line, derived from the feed severity."""
    GOOD = "good"
    DISRUPTED = "disrupted"
    NOT_RUNNING = "notRunning"


class TransportMode(Enum):
    """Transit category. Values are the TfL API mode names."""
    UNDERGROUND = "tube"
    OVERGROUND = "overground"
    LIGHT_RAIL = "dlr"
    NATIONAL_RAIL = "national-rail"


class LineId(Enum):
    """Known transit lines, keyed by display name."""
    BAKERLOO = "Bakerloo"
    C2C = "C2C"
    CENTRAL = "Central"
    CHILTERN = "Chiltern Railways"
    CIRCLE = "Circle"
    DISTRICT = "District"
    DLR = "DLR"
    ELIZABETH = "Elizabeth"
    GREAT_NORTHERN = "Great Northern"
    GREAT_WESTERN = "Great Western"
    GREATER_ANGLIA = "Greater Anglia"
    HAMMERSMITH_CITY = "Hammersmith & City"
    HEATHROW_CONNECT = "Heathrow Connect"
    HEATHROW_EXPRESS = "Heathrow Express"
    JUBILEE = "Jubilee"
    LONDON_MIDLAND = "London Midland"
    METROPOLITAN = "Metropolitan"
    NORTHERN = "Northern"
    LONDON_OVERGROUND = "London Overground"
    PICCADILLY = "Piccadilly"
    SOUTH_WESTERN = "South Western"
    SOUTHEASTERN = "Southeastern"
    SOUTHERN = "Southern"
    TFL_RAIL = "TfL Rail"
    THAMESLINK = "Thameslink"
    TRAMLINK = "Tramlink"
    VICTORIA = "Victoria"
    WATERLOO_CITY = "Waterloo & City"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def color(self) -> str:
        """Marker color as a hex string."""
        return LINE_COLORS[self]

    @property
    def mode(self) -> TransportMode:
        return LINE_MODES[self]

    @property
    def status_id(self) -> str:
        """Identifier of this line in the live status feed."""
        return STATUS_FEED_IDS[self]

    @classmethod
    def from_display_name(cls, name: str) -> "LineId":
        """
        Look up a line by its display name.

        Raises:
            ValueError: If no line has that display name.
        """
        return cls(name)


LINE_COLORS: Dict[LineId, str] = {
    LineId.BAKERLOO: "#996633",
    LineId.C2C: "#00FF00",
    LineId.CENTRAL: "#FF0000",
    LineId.CHILTERN: "#996633",
    LineId.CIRCLE: "#FFFF00",
    LineId.DISTRICT: "#00FF00",
    LineId.DLR: "#00FFFF",
    LineId.ELIZABETH: "#800080",
    LineId.GREAT_NORTHERN: "#000000",
    LineId.GREAT_WESTERN: "#000000",
    LineId.GREATER_ANGLIA: "#000000",
    LineId.HAMMERSMITH_CITY: "#FF2D55",
    LineId.HEATHROW_CONNECT: "#5AC8FA",
    LineId.HEATHROW_EXPRESS: "#800080",
    LineId.JUBILEE: "#808080",
    LineId.LONDON_MIDLAND: "#000000",
    LineId.METROPOLITAN: "#800080",
    LineId.NORTHERN: "#000000",
    LineId.LONDON_OVERGROUND: "#FF8000",
    LineId.PICCADILLY: "#0000FF",
    LineId.SOUTH_WESTERN: "#FF8000",
    LineId.SOUTHEASTERN: "#FF8000",
    LineId.SOUTHERN: "#FF8000",
    LineId.TFL_RAIL: "#000000",
    LineId.THAMESLINK: "#0000FF",
    LineId.TRAMLINK: "#0000FF",
    LineId.VICTORIA: "#0000FF",
    LineId.WATERLOO_CITY: "#5AC8FA",
}

_UNDERGROUND_LINES = (
    LineId.BAKERLOO, LineId.CENTRAL, LineId.CIRCLE, LineId.DISTRICT,
    LineId.ELIZABETH, LineId.HAMMERSMITH_CITY, LineId.JUBILEE,
    LineId.METROPOLITAN, LineId.NORTHERN, LineId.PICCADILLY,
    LineId.THAMESLINK, LineId.VICTORIA, LineId.WATERLOO_CITY,
)

LINE_MODES: Dict[LineId, TransportMode] = {
    line: (
        TransportMode.UNDERGROUND if line in _UNDERGROUND_LINES
        else TransportMode.LIGHT_RAIL if line is LineId.DLR
        else TransportMode.OVERGROUND if line is LineId.LONDON_OVERGROUND
        else TransportMode.NATIONAL_RAIL
    )
    for line in LineId
}

# Line ids as published by the TfL status feed. Must stay in step with
# resolver.derive_status_id.
STATUS_FEED_IDS: Dict[LineId, str] = {
    LineId.BAKERLOO: "bakerloo",
    LineId.C2C: "c2c",
    LineId.CENTRAL: "central",
    LineId.CHILTERN: "chiltern-railways",
    LineId.CIRCLE: "circle",
    LineId.DISTRICT: "district",
    LineId.DLR: "dlr",
    LineId.ELIZABETH: "elizabeth",
    LineId.GREAT_NORTHERN: "great-northern",
    LineId.GREAT_WESTERN: "great-western",
    LineId.GREATER_ANGLIA: "greater-anglia",
    LineId.HAMMERSMITH_CITY: "hammersmith-city",
    LineId.HEATHROW_CONNECT: "heathrow-connect",
    LineId.HEATHROW_EXPRESS: "heathrow-express",
    LineId.JUBILEE: "jubilee",
    LineId.LONDON_MIDLAND: "london-midland",
    LineId.METROPOLITAN: "metropolitan",
    LineId.NORTHERN: "northern",
    LineId.LONDON_OVERGROUND: "london-overground",
    LineId.PICCADILLY: "piccadilly",
    LineId.SOUTH_WESTERN: "south-western",
    LineId.SOUTHEASTERN: "southeastern",
    LineId.SOUTHERN: "southern",
    LineId.TFL_RAIL: "tfl-rail",
    LineId.THAMESLINK: "thameslink",
    LineId.TRAMLINK: "tramlink",
    LineId.VICTORIA: "victoria",
    LineId.WATERLOO_CITY: "waterloo-city",
}


@dataclass(frozen=True)
class Coordinate:
    """A position in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Station:
    """Represents a station that can carry a marker."""
    name: str
    coordinate: Coordinate

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude


@dataclass(frozen=True)
class LineAssociation:
    """Links a station to a line through a directional from/to pair."""
    line: LineId
    from_station: str
    to_station: str


@dataclass(frozen=True)
class LineStatus:
    """One status entry of a feed record."""
    severity: int
    severity_description: str = ""

    @property
    def status(self) -> Status:
        from .status import classify

        return classify(self.severity)


@dataclass(frozen=True)
class LineStatusRecord:
    """A line as reported by the live status feed."""
    id: str
    name: str = ""
    mode_name: str = ""
    line_statuses: Tuple[LineStatus, ...] = ()

    @property
    def current(self) -> Optional[LineStatus]:
        """First status entry, the only one used for display."""
        return self.line_statuses[0] if self.line_statuses else None


class ResolvedLine(NamedTuple):
    """A line serving a station and its current status, if the feed has one."""
    line: LineId
    status: Optional[Status]


class MarkerLine(NamedTuple):
    """A line as drawn on a marker, with the feed's status text."""
    line: LineId
    status: Optional[Status]
    description: Optional[str] = None  # e.g. "Severe Delays"


@dataclass(frozen=True)
class StationMarker:
    """Everything a renderer needs to draw one station marker."""
    station: Station
    lines: List[MarkerLine] = field(default_factory=list)


@dataclass(frozen=True)
class MarkerUpdate:
    """Result of feeding one location fix to the tracker."""
    changed: bool
    nearby: FrozenSet[Station]
    added: Tuple[str, ...] = ()    # Station names that need a new marker
    removed: Tuple[str, ...] = ()  # Station names whose marker should go
