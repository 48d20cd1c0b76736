"""Unit tests for JsonFileCache."""
import asyncio
import json
from unittest.mock import AsyncMock

from storage.json_file_cache import JsonFileCache, cache_key, slugify


class TestSlugify:
    """Test cases for slugify."""

    def test_slugify_query(self):
        assert slugify("Artisan Bakery, London, Ontario") == "artisan-bakery-london-ontario"

    def test_slugify_accents_and_symbols(self):
        assert slugify("  Café Crème & Co.  ") == "cafe-creme-co"


class TestCacheKey:
    """Test cases for cache_key."""

    def test_key_is_stable(self):
        assert cache_key("Artisan Bakery") == cache_key("Artisan Bakery")

    def test_non_ascii_queries_get_distinct_keys(self):
        """Test labels without ASCII letters do not share a cache file."""
        tokyo = cache_key("東京")
        beijing = cache_key("北京")

        assert tokyo != beijing
        assert tokyo and beijing

    def test_same_slug_different_queries(self):
        assert cache_key("Artisan Bakery") != cache_key("artisan bakery")


class TestJsonFileCache:
    """Test cases for JsonFileCache."""

    def test_creates_missing_directory(self, tmp_path):
        cache_dir = tmp_path / "nested" / "cache"

        JsonFileCache(cache_dir)

        assert cache_dir.is_dir()

    def test_miss_calls_producer_and_persists(self, tmp_path):
        """Test a miss stores the producer result as JSON."""
        cache = JsonFileCache(tmp_path)
        producer = AsyncMock(return_value=[{"lat": "43.0", "lon": "-81.2"}])

        result = asyncio.run(cache.get_or_compute("Artisan Bakery", producer))

        assert result == [{"lat": "43.0", "lon": "-81.2"}]
        producer.assert_awaited_once()
        stored = json.loads(cache.path_for("Artisan Bakery").read_text())
        assert cache.path_for("Artisan Bakery").name.startswith("artisan-bakery-")
        assert stored == result

    def test_hit_skips_producer(self, tmp_path):
        """Test two lookups of the same query call the producer once."""
        cache = JsonFileCache(tmp_path)
        producer = AsyncMock(return_value=[{"lat": "1.5", "lon": "2.5"}])

        async def scenario():
            first = await cache.get_or_compute("Some Place", producer)
            second = await cache.get_or_compute("Some Place", producer)
            return first, second

        first, second = asyncio.run(scenario())

        assert first == second
        assert producer.await_count == 1

    def test_error_results_are_not_persisted(self, tmp_path):
        """Test results with an error field are returned but not cached."""
        cache = JsonFileCache(tmp_path)
        producer = AsyncMock(return_value={"error": "Rate limited"})

        async def scenario():
            await cache.get_or_compute("Busy Place", producer)
            return await cache.get_or_compute("Busy Place", producer)

        result = asyncio.run(scenario())

        assert result == {"error": "Rate limited"}
        assert producer.await_count == 2
        assert not cache.path_for("Busy Place").exists()

    def test_empty_result_is_persisted(self, tmp_path):
        """Test an empty search response is still cached."""
        cache = JsonFileCache(tmp_path)
        producer = AsyncMock(return_value=[])

        asyncio.run(cache.get_or_compute("Nowhere", producer))

        assert cache.path_for("Nowhere").exists()
