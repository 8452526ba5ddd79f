"""Tests for category resolution and CDN transformation profiles."""

import pytest

from easel.lib.categories import PROFILES, Category, get_profile, resolve_category


class TestResolveCategory:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("hero", Category.HERO),
            ("hero_image", Category.HERO),
            ("artist_profile", Category.ARTIST),
            ("Artwork", Category.ARTWORK),
            (" exhibition ", Category.EXHIBITION),
            ("general", Category.GALLERY),
        ],
    )
    def test_known_names(self, value, expected):
        assert resolve_category(value) is expected

    @pytest.mark.parametrize("value", [None, "", "poster", "banner"])
    def test_unknown_defaults_to_gallery(self, value):
        assert resolve_category(value) is Category.GALLERY

    def test_enum_passes_through(self):
        assert resolve_category(Category.ARTIST) is Category.ARTIST


class TestTransformProfile:
    def test_hero_upload_options(self):
        options = get_profile("hero").upload_options("easel")
        assert options["folder"] == "easel/hero"
        assert options["quality"] == "auto"
        assert options["fetch_format"] == "auto"
        assert options["transformation"] == [
            {"width": 1920, "height": 1080, "crop": "fill", "gravity": "auto"}
        ]

    def test_artist_uses_face_gravity(self):
        options = get_profile(Category.ARTIST).upload_options("easel")
        assert options["folder"] == "easel/artists"
        assert options["transformation"][0]["gravity"] == "face"

    def test_unknown_category_uses_default_profile(self):
        options = get_profile("poster").upload_options("easel")
        assert options["folder"] == "easel"
        assert "transformation" not in options

    def test_every_category_has_a_profile(self):
        assert set(PROFILES) == set(Category)
