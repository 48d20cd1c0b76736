"""On-disk JSON cache for lookup responses."""
import hashlib
import json
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any, Awaitable, Callable, Union

logger = logging.getLogger(__name__)

NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    Normalize a query string into a filesystem-safe cache key.

    Args:
        text: Query string (e.g., "Artisan Bakery, London, Ontario")

    Returns:
        Lowercase ASCII slug (e.g., "artisan-bakery-london-ontario")
    """
    ascii_text = (
        unicodedata.normalize("NFKD", text)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    return NON_SLUG_RE.sub("-", ascii_text.lower()).strip("-")


def cache_key(query: str) -> str:
    """
    Build the cache file stem for a query.

    The slug keeps files readable; the hash suffix keeps distinct queries
    apart when their slugs collide (e.g., labels with no ASCII letters).

    Args:
        query: Query string

    Returns:
        Key such as "artisan-bakery-3f1c9a0b2d4e"
    """
    digest = hashlib.sha256(query.encode("utf-8")).hexdigest()[:12]
    slug = slugify(query)
    return f"{slug}-{digest}" if slug else digest


def _is_error_result(result: Any) -> bool:
    return isinstance(result, dict) and bool(result.get("error"))


class JsonFileCache:
    """Cache storing one JSON file per distinct query."""

    def __init__(self, cache_dir: Union[str, Path]):
        """
        Initialize the cache, creating the directory if absent.

        Args:
            cache_dir: Directory holding the cached JSON files
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized JsonFileCache in: {self.cache_dir}")

    def path_for(self, query: str) -> Path:
        return self.cache_dir / f"{cache_key(query)}.json"

    async def get_or_compute(
        self,
        query: str,
        producer: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached result for query, or compute and store it.

        A hit never calls the producer. Results carrying an "error" field
        are returned but not written, so they are retried on the next run.

        Args:
            query: Query string; see cache_key
            producer: Zero-argument async callable producing the result

        Returns:
            Cached or freshly produced result
        """
        cache_file = self.path_for(query)
        if cache_file.exists():
            logger.debug(f"Cache hit for '{query}': {cache_file.name}")
            with cache_file.open(encoding="utf-8") as f:
                return json.load(f)

        logger.debug(f"Cache miss for '{query}'")
        result = await producer()

        if _is_error_result(result):
            logger.warning(f"Not caching error result for '{query}': {result['error']}")
        else:
            with cache_file.open("w", encoding="utf-8") as f:
                json.dump(result, f, indent=2)
        return result
