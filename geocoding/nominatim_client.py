"""HTTP client for the Nominatim geocoding search API."""
import logging
import time
from typing import Any, List

import requests

logger = logging.getLogger(__name__)


class GeocodeLookupFailure(Exception):
    """Raised when a geocoding search fails after all retries."""

    def __init__(self, query: str, cause: Exception):
        self.query = query
        self.cause = cause
        super().__init__(f"Geocode lookup failed for '{query}': {cause}")


class NominatimClient:
    """Client for the Nominatim `/search` endpoint."""

    BASE_URL = "https://nominatim.openstreetmap.org/search"
    USER_AGENT = "markdown-to-ics"

    def __init__(
        self,
        base_url: str = BASE_URL,
        user_agent: str = USER_AGENT,
        timeout: int = 10,
        max_retries: int = 3,
        base_delay: float = 1,
    ):
        """
        Initialize the geocoding client.

        Args:
            base_url: Search endpoint URL
            user_agent: Identifying User-Agent header required by Nominatim
            timeout: HTTP request timeout in seconds (default: 10)
            max_retries: Attempts before giving up (default: 3)
            base_delay: Initial backoff delay in seconds (default: 1)
        """
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay

    def search(self, query: str) -> List[Any]:
        """
        Search for a free-text location with retry logic.

        Args:
            query: Location text (e.g., "Artisan Bakery, London, Ontario")

        Returns:
            Decoded JSON response, a list of place results

        Raises:
            GeocodeLookupFailure: If all retry attempts fail
        """
        params = {
            'q': query,
            'format': 'jsonv2'
        }
        headers = {'User-Agent': self.user_agent}

        for attempt in range(self.max_retries):
            try:
                logger.info(
                    f"Searching Nominatim for '{query}' "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                response = requests.get(
                    self.base_url,
                    params=params,
                    headers=headers,
                    timeout=self.timeout
                )
                response.raise_for_status()
                result = response.json()
                break

            except (requests.RequestException, ValueError) as e:
                if attempt < self.max_retries - 1:
                    delay = self.base_delay * (2 ** attempt)
                    logger.warning(
                        f"Search failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.max_retries} search attempts failed. Last error: {e}"
                    )
                    raise GeocodeLookupFailure(query, e) from e

        if isinstance(result, list) and result:
            logger.info(f"Nominatim search for '{query}' yielded: {result[0].get('display_name')}")
        else:
            logger.info(f"Nominatim search for '{query}' did not yield results")
        return result
