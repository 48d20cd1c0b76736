"""
Insert X-APPLE-STRUCTURED-LOCATION properties into iCalendar text.

Apple Calendar ignores the standard GEO property and does not look up
LOCATION on its own, so each valid GEO line gets a structured location
line inserted above it.

The label is only taken from a LOCATION line immediately after GEO. This
holds for output from writer.ics_writer; other layouts get the title
"undefined".

The title is copied raw from the serialized LOCATION line. It therefore
keeps iCalendar text escaping (e.g. "Cafe\\, London"), and a label long
enough to be folded at 75 octets is cut at the first fold.
"""
import math
import re
from typing import Optional

GEO_PREFIX = "GEO:"
LOCATION_PREFIX = "LOCATION:"
GEO_LINE_RE = re.compile(r"^GEO:([-\d\.]+);([-\d\.]+)")
LOCATION_LINE_RE = re.compile(r"^LOCATION:(.*)")
APPLE_RADIUS = 49
MISSING_TITLE = "undefined"


def _format_coordinate(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _parse_coordinate(text: str) -> Optional[float]:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _line_ending(line: str) -> str:
    content = line.rstrip("\r\n")
    return line[len(content):]


def structured_location_line(geo_line: str, next_line: Optional[str]) -> Optional[str]:
    """
    Build a structured location line for a GEO line.

    Args:
        geo_line: Candidate GEO line, line ending excluded
        next_line: Following line, line ending excluded, or None

    Returns:
        Property line without a line ending, or None if geo_line is not a
        valid GEO property
    """
    if not geo_line.startswith(GEO_PREFIX):
        return None
    match = GEO_LINE_RE.match(geo_line)
    if not match:
        return None
    lat = _parse_coordinate(match.group(1))
    lon = _parse_coordinate(match.group(2))
    if lat is None or lon is None:
        return None

    title = MISSING_TITLE
    if next_line is not None and next_line.startswith(LOCATION_PREFIX):
        title = LOCATION_LINE_RE.match(next_line).group(1)

    return (
        f"X-APPLE-STRUCTURED-LOCATION;VALUE=URI;X-APPLE-RADIUS={APPLE_RADIUS};"
        f"X-TITLE={title}:geo:{_format_coordinate(lat)},{_format_coordinate(lon)}"
    )


def shim_structured_location(ics_text: str) -> str:
    """
    Add a structured location line before every valid GEO line.

    All input lines are kept unchanged and in order.

    Args:
        ics_text: iCalendar document

    Returns:
        iCalendar document with structured location lines inserted
    """
    lines = ics_text.splitlines(keepends=True)
    output = []
    for index, line in enumerate(lines):
        next_line = lines[index + 1].rstrip("\r\n") if index + 1 < len(lines) else None
        inserted = structured_location_line(line.rstrip("\r\n"), next_line)
        if inserted is not None:
            output.append(inserted + (_line_ending(line) or "\n"))
        output.append(line)
    return "".join(output)
