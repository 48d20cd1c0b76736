"""Unit tests for iCalendar serialization."""
import pytest
from icalendar import Calendar

from processor.models import EventRecord, GeoCoordinate
from writer.ics_writer import SerializationError, serialize_events


def make_record(**overrides):
    """Create an EventRecord with sensible defaults."""
    values = {
        'start': (2025, 1, 4, 10, 0),
        'end': (2025, 1, 4, 12, 0),
        'title': 'Bread class',
        'description': 'Bring an apron.',
    }
    values.update(overrides)
    return EventRecord(**values)


class TestSerializeEvents:
    """Test cases for serialize_events."""

    def test_timed_event(self):
        output = serialize_events([make_record()])

        assert output.startswith("BEGIN:VCALENDAR\r\n")
        assert "SUMMARY:Bread class\r\n" in output
        assert "DTSTART:20250104T100000\r\n" in output
        assert "DTEND:20250104T120000\r\n" in output
        assert "DESCRIPTION:Bring an apron.\r\n" in output

    def test_all_day_event(self):
        """Test date-only values are written as DATE values."""
        output = serialize_events([make_record(start=(2025, 1, 1), end=(2025, 1, 2))])

        assert "DTSTART;VALUE=DATE:20250101\r\n" in output
        assert "DTEND;VALUE=DATE:20250102\r\n" in output

    def test_geo_directly_precedes_location(self):
        """Test LOCATION is written on the line after GEO."""
        record = make_record(geo=GeoCoordinate(lat=43.0, lon=-81.2), location='Cafe')

        output = serialize_events([record])

        assert "GEO:43.0;-81.2\r\nLOCATION:Cafe\r\n" in output

    def test_optional_fields_omitted(self):
        output = serialize_events([make_record()])

        assert "GEO:" not in output
        assert "LOCATION:" not in output
        assert "URL:" not in output

    def test_url_written(self):
        output = serialize_events([make_record(url='https://example.com/e')])

        assert "URL:https://example.com/e\r\n" in output

    def test_output_parses_back(self):
        """Test each record becomes one VEVENT with a UID."""
        records = [make_record(title='One'), make_record(title='Two')]

        calendar = Calendar.from_ical(serialize_events(records))
        events = calendar.walk('VEVENT')

        assert [str(event['SUMMARY']) for event in events] == ['One', 'Two']
        assert all(event.get('UID') for event in events)

    def test_invalid_values_raise(self):
        """Test impossible dates are wrapped as SerializationError."""
        with pytest.raises(SerializationError):
            serialize_events([make_record(start=(2025, 2, 30, 10, 0))])
