"""Infer concrete event start/end values from partial date/time text."""
import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from processor.models import DateTimeArray, DateTimeFragment

logger = logging.getLogger(__name__)

# Matches `(YYYY-MM-DD)?((from|at))?(HH:MM)?`
DATE_TIME_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})?(?:\s*(?:from|at)\s*)?(?P<time>\d{1,2}:\d{2})?"
)

RANGE_SEPARATOR = " to "


class UnrecognizedDateTimeFormat(ValueError):
    """Raised when a start/end pair cannot be resolved into an event range."""

    def __init__(self, start_text: str, end_text: str, reason: str = ""):
        self.start_text = start_text
        self.end_text = end_text
        message = (
            f'Unrecognized date-time format: start "{start_text}", '
            f'end "{end_text}"'
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


def _to_int(part: Optional[str]) -> Optional[int]:
    if part is None:
        return None
    try:
        return int(part, 10)
    except ValueError:
        return None


def split_range(date_part: str) -> Tuple[str, str]:
    """
    Split the date portion of a line into start and end text.

    Args:
        date_part: Text such as "2025-01-01 from 10:00 to 12:00"

    Returns:
        Tuple of (start_text, end_text); end_text is "" when absent
    """
    start_text, _, end_text = date_part.partition(RANGE_SEPARATOR)
    return start_text, end_text


def parse_fragment(text: str) -> DateTimeFragment:
    """
    Parse one side of a date/time range.

    Accepts `YYYY-MM-DD`, `YYYY-MM-DD at HH:MM`, `YYYY-MM-DD from HH:MM`
    or a bare `HH:MM`. Either part may be missing.

    Args:
        text: Fragment text

    Returns:
        DateTimeFragment with has_specific_* flags set only when every
        sub-component of that part parsed as a number
    """
    match = DATE_TIME_RE.match(text)
    date_string = match.group("date") if match else None
    time_string = match.group("time") if match else None

    if date_string:
        year, month, day = (_to_int(part) for part in date_string.split("-"))
    else:
        year, month, day = None, None, None

    time_parts = time_string.split(":") if time_string else []
    if len(time_parts) == 2:
        hours, minutes = (_to_int(part) for part in time_parts)
    else:
        hours, minutes = None, None

    return DateTimeFragment(
        raw=text,
        date=(year, month, day),
        time=(hours, minutes),
        has_specific_date=all(part is not None for part in (year, month, day)),
        has_specific_time=all(part is not None for part in (hours, minutes)),
    )


def _as_date(parts) -> date:
    return date(*parts)


def _date_array(value: date) -> DateTimeArray:
    return (value.year, value.month, value.day)


def _datetime_array(value: datetime) -> DateTimeArray:
    return (value.year, value.month, value.day, value.hour, value.minute)


def resolve_range(
    start: DateTimeFragment,
    end: DateTimeFragment,
    default_duration_hours: float = 1,
) -> Tuple[DateTimeArray, DateTimeArray]:
    """
    Resolve a start/end fragment pair into concrete event values.

    All-day results use an exclusive end date, so a single-day event on
    2025-01-01 ends on 2025-01-02.

    Args:
        start: Parsed start fragment
        end: Parsed end fragment
        default_duration_hours: Duration used when only one time is given

    Returns:
        Tuple of (start, end) arrays

    Raises:
        UnrecognizedDateTimeFormat: If there is no start date, or a date
            does not exist on the calendar
    """
    has_start_date = start.has_specific_date
    has_end_date = end.has_specific_date
    has_start_time = start.has_specific_time
    has_end_time = end.has_specific_time
    duration = timedelta(hours=default_duration_hours)

    if not has_start_date:
        raise UnrecognizedDateTimeFormat(start.raw, end.raw, "missing start date")

    try:
        if has_end_date:
            # 2025-01-01 at 10:00 to 2025-02-02 at 12:00
            if has_start_time and has_end_time:
                return start.date + start.time, end.date + end.time
            # 2025-01-01 at 10:00 to 2025-02-02
            if has_start_time:
                return start.date + start.time, end.date + (23, 59)
            # 2025-01-01 to 2025-01-02 at 00:30
            if has_end_time:
                return start.date + (0, 0), end.date + end.time
            # 2025-01-01 to 2025-01-03
            return (
                _date_array(_as_date(start.date)),
                _date_array(_as_date(end.date) + timedelta(days=1)),
            )

        # 2025-01-01 from 10:00 to 12:00
        if has_start_time and has_end_time:
            return start.date + start.time, start.date + end.time
        # 2025-01-01 at 23:30
        if has_start_time:
            start_value = datetime(*start.date, *start.time)
            return start.date + start.time, _datetime_array(start_value + duration)
        # 2025-01-01 to 00:30 starts on 2024-12-31 at 23:30
        if has_end_time:
            end_value = datetime(*start.date, *end.time)
            return _datetime_array(end_value - duration), _datetime_array(end_value)
        # 2025-01-01
        start_day = _as_date(start.date)
        return _date_array(start_day), _date_array(start_day + timedelta(days=1))
    except ValueError as e:
        raise UnrecognizedDateTimeFormat(start.raw, end.raw, str(e)) from e


def infer_event_range(
    date_part: str,
    default_duration_hours: float = 1,
) -> Tuple[DateTimeArray, DateTimeArray]:
    """Split, parse and resolve the date portion of an event line."""
    start_text, end_text = split_range(date_part)
    start = parse_fragment(start_text)
    end = parse_fragment(end_text)
    logger.debug(f"Parsed fragments start={start} end={end}")
    return resolve_range(start, end, default_duration_hours)
