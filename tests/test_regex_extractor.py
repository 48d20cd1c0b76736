"""Unit tests for description regex extraction."""
from processor.models import GeoCoordinate
from processor.regex_extractor import (
    extract_description,
    extract_geo,
    extract_host,
    extract_location_label,
    extract_url,
    extract_url_label,
    parse_metadata,
)


class TestExtractGeo:
    """Test cases for extract_geo."""

    def test_valid_geo(self):
        assert extract_geo("Geo is 43.0:-81.2.") == GeoCoordinate(lat=43.0, lon=-81.2)

    def test_geo_inside_text(self):
        geo = extract_geo("Meet at the bakery. Geo is 42.98:-81.25. Bring cash.")

        assert geo == GeoCoordinate(lat=42.98, lon=-81.25)

    def test_malformed_geo(self):
        """Test non-numeric values do not match."""
        assert extract_geo("Geo is abc:def.") is None

    def test_unparseable_numbers(self):
        """Test values matching the pattern but not parsing as numbers."""
        assert extract_geo("Geo is -:-.") is None

    def test_trailing_dot_swallowed_by_capture(self):
        """Test a sentence-ending dot captured with the longitude is ignored."""
        geo = extract_geo("Geo is 43.0:-81.2.. See you there")

        assert geo == GeoCoordinate(lat=43.0, lon=-81.2)

    def test_missing_geo(self):
        assert extract_geo("No coordinates here") is None


class TestExtractLabels:
    """Test cases for the label extractors."""

    def test_location_label(self):
        assert extract_location_label("Location is Artisan Bakery. Fun.") == "Artisan Bakery"

    def test_location_label_missing(self):
        assert extract_location_label("Fun times") is None

    def test_location_label_empty(self):
        """Test an empty capture is reported as absent."""
        assert extract_location_label("Location is . Fun.") is None

    def test_url(self):
        text = "URL is <https://example.com/events/1>. URL label is Register."

        assert extract_url(text) == "https://example.com/events/1"
        assert extract_url_label(text) == "Register"

    def test_url_missing(self):
        assert extract_url("URL label is Register.") is None

    def test_description(self):
        assert extract_description("Description is `A public exhibition.`") == "A public exhibition."

    def test_empty_description(self):
        assert extract_description("Description is ``") is None

    def test_host(self):
        assert extract_host("Hosted by London Public Library. More.") == "London Public Library"


class TestParseMetadata:
    """Test cases for parse_metadata."""

    def test_without_description_uses_raw_text(self):
        text = "Hosted by Someone. Location is Cafe."

        metadata = parse_metadata(text)

        assert metadata.description == text
        assert metadata.host == "Someone"

    def test_description_with_host(self):
        text = "Hosted by LPL. Description is `An exhibition.`"

        metadata = parse_metadata(text)

        assert metadata.description == "Hosted by LPL. An exhibition."

    def test_description_without_host(self):
        text = "URL is <https://example.com>. Description is `Talk.`"

        metadata = parse_metadata(text)

        assert metadata.description == "Talk."
        assert metadata.url == "https://example.com"
        assert metadata.host is None
