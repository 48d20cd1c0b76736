"""Data models for markdown event conversion."""
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

DateParts = Tuple[Optional[int], Optional[int], Optional[int]]
TimeParts = Tuple[Optional[int], Optional[int]]
# (Y, M, D) for all-day values, (Y, M, D, h, m) for timed values
DateTimeArray = Union[Tuple[int, int, int], Tuple[int, int, int, int, int]]


def is_meaningful_coordinate(lat, lon) -> bool:
    """
    Check whether a lat/lon pair counts as specified.

    Both values must be truthy finite numbers. A coordinate of exactly 0
    is indistinguishable from an unset value and is rejected.
    """
    if not lat or not lon:
        return False
    try:
        return math.isfinite(lat) and math.isfinite(lon)
    except TypeError:
        return False


@dataclass(frozen=True)
class DateTimeFragment:
    """One half (start or end) of a textual date/time range."""
    raw: str
    date: DateParts
    time: TimeParts
    has_specific_date: bool
    has_specific_time: bool


@dataclass(frozen=True)
class GeoCoordinate:
    """Latitude/longitude pair."""
    lat: float
    lon: float


@dataclass
class EventMetadata:
    """Optional metadata pulled out of an event description."""
    description: str
    url: Optional[str] = None
    url_label: Optional[str] = None
    host: Optional[str] = None


@dataclass
class LocationResult:
    """Geo and location label resolved for one event."""
    geo: Optional[GeoCoordinate] = None
    location: Optional[str] = None
    geo_source: Optional[str] = None


@dataclass
class EventRecord:
    """Structured event ready for serialization."""
    start: DateTimeArray
    end: DateTimeArray
    title: str
    description: str
    geo: Optional[GeoCoordinate] = None
    location: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_all_day(self) -> bool:
        return len(self.start) == 3


@dataclass
class ConversionSummary:
    """Result of a conversion run."""
    lines_read: int = 0
    events_written: int = 0
    geocode_lookups: int = 0
    geocode_failures: int = 0
    duration_seconds: float = 0.0
