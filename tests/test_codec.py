"""Tests for URL and identifier conversions."""

from urllib.parse import urlparse

import pytest

from easel.lib.storage.codec import (
    build_delivery_url,
    build_local_url,
    build_optimized_url,
    extract_identifier,
    extract_local_identifier,
    is_remote_url,
)

HERO_URL = "https://res.cloudinary.com/gallery-demo/image/upload/v1712345678/easel/hero/abc123.jpg"


class TestIsRemoteUrl:
    def test_cdn_url(self):
        assert is_remote_url(HERO_URL) is True

    def test_other_cloudinary_subdomain(self):
        assert is_remote_url("https://gallery-demo-res.cloudinary.com/image/upload/easel/x.png") is True

    def test_custom_cdn_host(self):
        url = "https://media.example.org/image/upload/easel/x.png"
        assert is_remote_url(url, cdn_host="media.example.org") is True
        assert is_remote_url(url) is False

    def test_local_url(self):
        assert is_remote_url("/api/files/42") is False

    def test_lookalike_host_is_not_remote(self):
        """A host merely containing the CDN name is not the CDN."""
        assert is_remote_url("https://cloudinary.com.evil.example/easel/x.png") is False

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert is_remote_url(value) is False


class TestExtractIdentifier:
    def test_folder_and_stem(self):
        assert extract_identifier(HERO_URL, "easel") == "easel/hero/abc123"

    def test_transformation_segments_are_skipped(self):
        url = "https://res.cloudinary.com/gallery-demo/image/upload/c_fill,w_400/v1/easel/artists/jane.webp"
        assert extract_identifier(url, "easel") == "easel/artists/jane"

    def test_query_string_ignored(self):
        assert extract_identifier(HERO_URL + "?_a=BAVAfVDW0", "easel") == "easel/hero/abc123"

    def test_stem_stops_at_first_dot(self):
        url = "https://res.cloudinary.com/gallery-demo/image/upload/easel/photo.final.v2.jpg"
        assert extract_identifier(url, "easel") == "easel/photo"

    def test_marker_missing(self):
        url = "https://res.cloudinary.com/gallery-demo/image/upload/v1/other/abc.jpg"
        assert extract_identifier(url, "easel") is None

    def test_non_remote_url(self):
        assert extract_identifier("/api/files/7", "easel") is None

    def test_nested_root_folder(self):
        url = "https://res.cloudinary.com/gallery-demo/image/upload/v1/sites/easel/hero/abc.jpg"
        assert extract_identifier(url, "sites/easel") == "sites/easel/hero/abc"

    def test_cloud_name_matching_root_folder_is_not_the_id(self):
        url = "https://res.cloudinary.com/easel/image/upload/v1/easel/hero/abc123.jpg"
        assert extract_identifier(url, "easel") == "easel/hero/abc123"

    def test_private_host_has_no_cloud_segment(self):
        url = "https://media.example.org/image/upload/c_fill,w_400/v3/easel/artworks/still.png"
        assert extract_identifier(url, "easel", cdn_host="media.example.org") == "easel/artworks/still"

    def test_root_folder_shaped_like_a_transformation(self):
        url = "https://res.cloudinary.com/gallery-demo/image/upload/my_site/hero/abc.jpg"
        assert extract_identifier(url, "my_site") == "my_site/hero/abc"


class TestBuildUrls:
    def test_delivery_url_is_remote(self):
        url = build_delivery_url("easel/hero/abc123", "gallery-demo")
        assert url.startswith("https://res.cloudinary.com/gallery-demo/image/upload/")
        assert urlparse(url).path.endswith("/easel/hero/abc123")

    def test_optimized_defaults_to_auto_quality_and_format(self):
        url = build_optimized_url("easel/hero/abc123", "gallery-demo")
        assert "q_auto" in url
        assert "f_auto" in url

    def test_optimized_with_crop(self):
        url = build_optimized_url(
            "easel/hero/abc123", "gallery-demo", width=300, height=200, crop="fill"
        )
        assert "c_fill" in url
        assert "w_300" in url
        assert "h_200" in url

    def test_round_trip(self):
        """An uploaded URL maps back to an id whose optimized URL is the same asset."""
        identifier = extract_identifier(HERO_URL, "easel")
        rebuilt = build_optimized_url(identifier, "gallery-demo")

        assert is_remote_url(rebuilt)
        assert extract_identifier(rebuilt, "easel") == identifier

    @pytest.mark.parametrize("cloud_name", ["easel", "upload", "hero"])
    def test_round_trip_when_cloud_name_collides(self, cloud_name):
        """Path segments ahead of the public id never leak into it."""
        url = build_delivery_url("easel/hero/abc123", cloud_name)
        assert extract_identifier(url, "easel") == "easel/hero/abc123"

        optimized = build_optimized_url("easel/hero/abc123", cloud_name, width=300, crop="fill")
        assert extract_identifier(optimized, "easel") == "easel/hero/abc123"


class TestLocalUrls:
    def test_build(self):
        assert build_local_url(42, "/api/files") == "/api/files/42"
        assert build_local_url("42", "/api/files/") == "/api/files/42"

    def test_extract(self):
        assert extract_local_identifier("/api/files/42", "/api/files") == "42"

    def test_extract_absolute_url(self):
        assert extract_local_identifier("https://gallery.example/api/files/42?x=1", "/api/files") == "42"

    def test_extract_metadata_path(self):
        assert extract_local_identifier("/api/files/42/metadata", "/api/files") == "42"

    @pytest.mark.parametrize("url", ["/api/files/abc", "/api/images/42", "", None])
    def test_extract_rejects(self, url):
        assert extract_local_identifier(url, "/api/files") is None
