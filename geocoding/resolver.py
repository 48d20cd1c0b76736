"""Resolve event geo data from authored coordinates or a geocoding lookup."""
import asyncio
import logging
from typing import Any, Optional

from geocoding.nominatim_client import GeocodeLookupFailure, NominatimClient
from geocoding.throttle import ThrottledCall
from processor.models import GeoCoordinate, LocationResult, is_meaningful_coordinate
from processor.regex_extractor import extract_geo, extract_location_label
from storage.json_file_cache import JsonFileCache

logger = logging.getLogger(__name__)

# Apple Calendar will not show geo data without a LOCATION property
FALLBACK_LOCATION = "Event location"

FAILURE_POLICY_ABORT = "abort"
FAILURE_POLICY_SKIP = "skip"
FAILURE_POLICIES = (FAILURE_POLICY_ABORT, FAILURE_POLICY_SKIP)


def geo_from_search_result(result: Any) -> Optional[GeoCoordinate]:
    """
    Read a coordinate from the first element of a search response.

    Args:
        result: Decoded JSON search response

    Returns:
        GeoCoordinate, or None if the response has no usable first result
    """
    if not isinstance(result, list) or not result:
        return None
    top = result[0]
    if not isinstance(top, dict):
        return None
    try:
        lat = float(top.get('lat'))
        lon = float(top.get('lon'))
    except (TypeError, ValueError):
        return None
    if not is_meaningful_coordinate(lat, lon):
        return None
    return GeoCoordinate(lat=lat, lon=lon)


class GeocodeResolver:
    """Resolver for event geo and location label."""

    def __init__(
        self,
        client: NominatimClient,
        cache: JsonFileCache,
        interval_ms: float = 1000,
        failure_policy: str = FAILURE_POLICY_ABORT,
    ):
        """
        Initialize the resolver.

        Args:
            client: Geocoding search client
            cache: Cache for search responses
            interval_ms: Minimum spacing between network lookups
            failure_policy: "abort" to re-raise lookup failures, "skip" to
                log them and leave the event without geo
        """
        if failure_policy not in FAILURE_POLICIES:
            raise ValueError(
                f"Unknown geocode failure policy '{failure_policy}', "
                f"expected one of {FAILURE_POLICIES}"
            )
        self.client = client
        self.cache = cache
        self.failure_policy = failure_policy
        self.lookups = 0
        self.failures = 0
        self._search = ThrottledCall(self._search_async, interval_ms)

    async def _search_async(self, query: str) -> Any:
        self.lookups += 1
        return await asyncio.to_thread(self.client.search, query)

    async def search(self, query: str) -> Any:
        """Search through the cache, then the throttled client."""
        return await self.cache.get_or_compute(query, lambda: self._search(query))

    async def resolve(self, text: str) -> LocationResult:
        """
        Resolve geo and location for one event description.

        Authored `Geo is` coordinates win. Otherwise a `Location is` label
        is geocoded and the top result used.

        Args:
            text: Raw event description

        Returns:
            LocationResult with geo and location set where known

        Raises:
            GeocodeLookupFailure: If a lookup fails under the "abort" policy
        """
        authored = extract_geo(text)
        label = extract_location_label(text)

        geo = None
        source = None
        if authored is not None and is_meaningful_coordinate(authored.lat, authored.lon):
            geo = authored
            source = 'authored'
        elif label:
            geo = await self._lookup(label)
            if geo is not None:
                source = 'geocoded'

        if label:
            location = label
        elif geo is not None:
            location = FALLBACK_LOCATION
        else:
            location = None

        return LocationResult(geo=geo, location=location, geo_source=source)

    async def _lookup(self, label: str) -> Optional[GeoCoordinate]:
        try:
            result = await self.search(label)
        except GeocodeLookupFailure as e:
            self.failures += 1
            if self.failure_policy == FAILURE_POLICY_ABORT:
                raise
            logger.warning(f"Skipping geo for '{label}': {e}")
            return None

        geo = geo_from_search_result(result)
        if geo is None:
            logger.info(f"No usable coordinates found for '{label}'")
        return geo
