"""Command-line entry point converting a markdown event list to an ICS file."""
import argparse
import asyncio
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from geocoding.nominatim_client import NominatimClient
from geocoding.resolver import FAILURE_POLICY_ABORT, GeocodeResolver
from processor.line_parser import MarkdownEventParser
from processor.models import ConversionSummary
from storage.json_file_cache import JsonFileCache
from writer.ics_writer import serialize_events
from writer.structured_location import shim_structured_location

DEFAULT_CACHE_DIR = Path(__file__).resolve().parent / 'cache'


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def build_parser_from_env() -> MarkdownEventParser:
    """Build the event line parser and its geocoding stack from environment variables."""
    cache = JsonFileCache(os.environ.get('CACHE_DIR', str(DEFAULT_CACHE_DIR)))
    client = NominatimClient(
        base_url=os.environ.get('NOMINATIM_URL', NominatimClient.BASE_URL),
        user_agent=os.environ.get('NOMINATIM_USER_AGENT', NominatimClient.USER_AGENT),
        timeout=int(os.environ.get('GEOCODE_TIMEOUT_SECONDS', '10'))
    )
    resolver = GeocodeResolver(
        client=client,
        cache=cache,
        interval_ms=float(os.environ.get('GEOCODE_INTERVAL_MS', '1000')),
        failure_policy=os.environ.get('GEOCODE_FAILURE_POLICY', FAILURE_POLICY_ABORT)
    )
    return MarkdownEventParser(
        resolver=resolver,
        default_duration_hours=float(os.environ.get('DEFAULT_DURATION_HOURS', '1'))
    )


async def convert(
    calendar_file: Path,
    output_file: Path,
    parser: MarkdownEventParser,
) -> ConversionSummary:
    """
    Convert a markdown calendar file into an ICS file.

    The output file is written only after every event has been parsed
    and serialized.

    Args:
        calendar_file: Markdown input path
        output_file: ICS output path, overwritten if present
        parser: Event line parser

    Returns:
        ConversionSummary with run statistics
    """
    logger = logging.getLogger(__name__)
    start_time = time.time()

    text = calendar_file.read_text(encoding='utf-8')
    records = await parser.parse_document(text)

    ics_text = serialize_events(records)
    # Apple Calendar ignores GEO without X-APPLE-STRUCTURED-LOCATION
    ics_text = shim_structured_location(ics_text)
    output_file.write_text(ics_text, encoding='utf-8', newline='')

    resolver = parser.resolver
    summary = ConversionSummary(
        lines_read=len(text.rstrip('\n').split('\n')),
        events_written=len(records),
        geocode_lookups=resolver.lookups,
        geocode_failures=resolver.failures,
        duration_seconds=round(time.time() - start_time, 2)
    )
    logger.info(f"Wrote {summary.events_written} events to {output_file}")
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the converter.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:]

    Returns:
        Process exit code
    """
    arg_parser = argparse.ArgumentParser(
        description='Convert a markdown event list to an ICS calendar file.'
    )
    arg_parser.add_argument('calendar_file', type=Path, help='Markdown event list')
    arg_parser.add_argument('output_file', type=Path, help='ICS file to write')
    args = arg_parser.parse_args(argv)

    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)

    logger.info(
        f'Converting "{args.calendar_file}" to "{args.output_file}"',
        extra={
            'calendar_file': str(args.calendar_file),
            'output_file': str(args.output_file)
        }
    )

    try:
        parser = build_parser_from_env()
        summary = asyncio.run(convert(args.calendar_file, args.output_file, parser))
    except Exception as e:
        logger.error(
            f"Conversion failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1

    logger.info(
        "Conversion completed successfully",
        extra={
            'lines_read': summary.lines_read,
            'events_written': summary.events_written,
            'geocode_lookups': summary.geocode_lookups,
            'geocode_failures': summary.geocode_failures,
            'duration_seconds': summary.duration_seconds
        }
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
