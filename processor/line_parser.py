"""Parser turning markdown event lines into structured event records."""
import logging
import re
from typing import List

from geocoding.resolver import GeocodeResolver
from processor.datetime_inference import infer_event_range
from processor.models import EventRecord
from processor.regex_extractor import parse_metadata

logger = logging.getLogger(__name__)

EVENT_LINE_RE = re.compile(r"^- \d{4}-\d{2}-\d{2}")
LIST_MARKER_LENGTH = 2
DATE_SEPARATOR = " - "
TITLE_SEPARATOR = ". "


class MarkdownEventParser:
    """Parser for markdown lines of the form `- <dates> - <title>. <description>`."""

    def __init__(self, resolver: GeocodeResolver, default_duration_hours: float = 1):
        """
        Initialize the parser.

        Args:
            resolver: Resolver used for event geo and location
            default_duration_hours: Duration for events with a single time
        """
        self.resolver = resolver
        self.default_duration_hours = default_duration_hours

    def select_event_lines(self, text: str) -> List[str]:
        """
        Select lines starting with `- YYYY-MM-DD` and strip the list marker.

        Args:
            text: Full markdown document

        Returns:
            List of trimmed event lines, in document order
        """
        lines = (line.rstrip("\r") for line in text.split("\n"))
        return [
            line[LIST_MARKER_LENGTH:]
            for line in lines
            if EVENT_LINE_RE.match(line)
        ]

    async def parse_line(self, line: str) -> EventRecord:
        """
        Parse a single trimmed event line.

        Args:
            line: Event line without its list marker

        Returns:
            EventRecord

        Raises:
            UnrecognizedDateTimeFormat: If the date portion cannot be resolved
        """
        date_part, _, rest = line.partition(DATE_SEPARATOR)
        title, _, raw_description = rest.partition(TITLE_SEPARATOR)

        start, end = infer_event_range(date_part, self.default_duration_hours)
        if end < start:
            logger.warning(f"Event '{title}' ends before it starts: {start} -> {end}")

        location = await self.resolver.resolve(raw_description)
        metadata = parse_metadata(raw_description)

        return EventRecord(
            start=start,
            end=end,
            title=title,
            description=metadata.description,
            geo=location.geo,
            location=location.location,
            url=metadata.url,
        )

    async def parse_document(self, text: str) -> List[EventRecord]:
        """
        Parse every event line in a markdown document, one after another.

        Args:
            text: Full markdown document

        Returns:
            List of EventRecord objects
        """
        lines = self.select_event_lines(text)
        logger.info(f"Found {len(lines)} event lines")

        records = []
        for line in lines:
            records.append(await self.parse_line(line))
        return records
