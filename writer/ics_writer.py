"""iCalendar serialization of event records."""
import logging
import uuid
from datetime import date, datetime, timezone
from typing import List

from icalendar import Calendar, Event

from processor.models import DateTimeArray, EventRecord

logger = logging.getLogger(__name__)

PRODID = "-//markdown-to-ics//EN"


class SerializationError(Exception):
    """Raised when event records cannot be written as iCalendar text."""


def _to_ical_value(value: DateTimeArray):
    # Naive values are written as floating local time
    if len(value) == 3:
        return date(*value)
    return datetime(*value)


def _build_event(record: EventRecord, stamp: datetime) -> Event:
    event = Event()
    event.add('uid', str(uuid.uuid4()))
    event.add('dtstamp', stamp)
    event.add('summary', record.title)
    event.add('dtstart', _to_ical_value(record.start))
    event.add('dtend', _to_ical_value(record.end))
    event.add('description', record.description)
    if record.url:
        event.add('url', record.url)
    # GEO must directly precede LOCATION, see writer.structured_location
    if record.geo is not None:
        event.add('geo', (record.geo.lat, record.geo.lon))
    if record.location:
        event.add('location', record.location)
    return event


def serialize_events(records: List[EventRecord]) -> str:
    """
    Serialize event records to an iCalendar document.

    Args:
        records: Event records to write

    Returns:
        iCalendar text with CRLF line endings

    Raises:
        SerializationError: If any record holds values the format rejects
    """
    calendar = Calendar()
    calendar.add('prodid', PRODID)
    calendar.add('version', '2.0')
    stamp = datetime.now(timezone.utc)

    try:
        for record in records:
            calendar.add_component(_build_event(record, stamp))
        output = calendar.to_ical().decode('utf-8')
    except (ValueError, TypeError) as e:
        logger.error(f"Error creating ICS output: {e}")
        raise SerializationError(f"Error creating ICS file: {e}") from e

    logger.info(f"Serialized {len(records)} events")
    return output
