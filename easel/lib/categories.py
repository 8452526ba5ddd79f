"""Image categories and the CDN transformation profile each one uploads with."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    HERO = "hero"
    ARTWORK = "artwork"
    ARTIST = "artist"
    EXHIBITION = "exhibition"
    GALLERY = "gallery"


DEFAULT_CATEGORY = Category.GALLERY

# Client-supplied names (including the legacy database enum values)
_CATEGORY_ALIASES: dict[str, Category] = {
    "hero": Category.HERO,
    "hero_image": Category.HERO,
    "artwork": Category.ARTWORK,
    "artist": Category.ARTIST,
    "artist_profile": Category.ARTIST,
    "exhibition": Category.EXHIBITION,
    "gallery": Category.GALLERY,
    "general": Category.GALLERY,
}


@dataclass(frozen=True)
class TransformProfile:
    """Incoming transformation applied by the CDN when an image is uploaded."""

    subfolder: str = ""
    width: int | None = None
    height: int | None = None
    crop: str | None = None
    gravity: str | None = None

    def folder(self, root_folder: str) -> str:
        if self.subfolder:
            return f"{root_folder}/{self.subfolder}"
        return root_folder

    def upload_options(self, root_folder: str) -> dict:
        """Build the Cloudinary upload options for this profile."""
        options: dict = {
            "folder": self.folder(root_folder),
            "resource_type": "auto",
            "quality": "auto",
            "fetch_format": "auto",
        }
        if self.width is not None or self.height is not None:
            step = {"width": self.width, "height": self.height, "crop": self.crop, "gravity": self.gravity}
            options["transformation"] = [{k: v for k, v in step.items() if v is not None}]
        return options


PROFILES: dict[Category, TransformProfile] = {
    Category.HERO: TransformProfile("hero", 1920, 1080, "fill", "auto"),
    Category.ARTWORK: TransformProfile("artworks", 1000, 1000, "fill", "auto"),
    Category.ARTIST: TransformProfile("artists", 400, 400, "fill", "face"),
    Category.EXHIBITION: TransformProfile("exhibitions", 1200, 800, "fill", "auto"),
    Category.GALLERY: TransformProfile(),
}


def resolve_category(value: str | Category | None) -> Category:
    """Map a free-form category name to a known category, defaulting to gallery."""
    if isinstance(value, Category):
        return value
    if not value:
        return DEFAULT_CATEGORY
    return _CATEGORY_ALIASES.get(value.strip().lower(), DEFAULT_CATEGORY)


def get_profile(category: str | Category | None) -> TransformProfile:
    return PROFILES[resolve_category(category)]
