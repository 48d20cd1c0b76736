"""Regex extraction of geo, location and metadata from event descriptions."""
import math
import re
from typing import Optional

from processor.models import EventMetadata, GeoCoordinate

# NOTE: the trailing `.` in several patterns is unescaped and matches any
# character. Existing calendar files rely on this, so keep it as is.
GEO_RE = re.compile(r"Geo is ([-\d\.]+):([-\d\.]+).")
LOCATION_RE = re.compile(r"Location is ([^.]*).")
URL_RE = re.compile(r"URL is <([^>]*)\>")
URL_LABEL_RE = re.compile(r"URL label is ([^.]*)\.?")
DESCRIPTION_RE = re.compile(r"Description is `([^`]*\.?)`")
HOST_RE = re.compile(r"Hosted by ([^.]*)\.?")
LEADING_NUMBER_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


def get_regex_match(text: str, pattern: re.Pattern) -> Optional[str]:
    """Return the first capture group of pattern in text, or None if absent or empty."""
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1)
    if not isinstance(value, str) or value == "":
        return None
    return value


def _parse_float(value: str) -> Optional[float]:
    # The greedy capture can swallow a sentence-ending dot ("-81.25."),
    # so only the leading number is read.
    match = LEADING_NUMBER_RE.match(value)
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def extract_geo(text: str) -> Optional[GeoCoordinate]:
    """
    Extract an authored `Geo is <lat>:<lon>.` coordinate.

    Returns None unless both values parse as finite numbers.
    """
    match = GEO_RE.search(text)
    if not match:
        return None
    lat = _parse_float(match.group(1))
    lon = _parse_float(match.group(2))
    if lat is None or lon is None:
        return None
    return GeoCoordinate(lat=lat, lon=lon)


def extract_location_label(text: str) -> Optional[str]:
    return get_regex_match(text, LOCATION_RE)


def extract_url(text: str) -> Optional[str]:
    return get_regex_match(text, URL_RE)


def extract_url_label(text: str) -> Optional[str]:
    return get_regex_match(text, URL_LABEL_RE)


def extract_description(text: str) -> Optional[str]:
    return get_regex_match(text, DESCRIPTION_RE)


def extract_host(text: str) -> Optional[str]:
    return get_regex_match(text, HOST_RE)


def parse_metadata(text: str) -> EventMetadata:
    """
    Pull URL, URL label, host and description out of a description string.

    Without an explicit `Description is ...` the whole text is used as the
    description. Otherwise the host, if any, is prefixed as "Hosted by X.".

    Args:
        text: Raw description text from an event line

    Returns:
        EventMetadata with the composed description
    """
    url = extract_url(text)
    url_label = extract_url_label(text)
    description_match = extract_description(text)
    host = extract_host(text)

    if description_match is None:
        description = text
    else:
        parts = []
        if host is not None:
            parts.append(f"Hosted by {host}.")
        parts.append(description_match)
        description = " ".join(parts)

    return EventMetadata(
        description=description,
        url=url,
        url_label=url_label,
        host=host,
    )
