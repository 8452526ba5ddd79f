"""Conversions between delivery URLs and backend identifiers.

CDN identifiers are Cloudinary public ids such as ``easel/hero/abc123``; the
delivery URL carries them as trailing path segments, optionally behind
transformation and version segments and always with a file extension.
Database identifiers are the numeric row id embedded in an app-relative URL
such as ``/api/files/42``.
"""

from __future__ import annotations

import re
from urllib.parse import unquote, urlparse

from cloudinary.utils import cloudinary_url

DEFAULT_CDN_HOST = "res.cloudinary.com"
_CLOUDINARY_DOMAIN = "cloudinary.com"
_SHARED_HOST = re.compile(r"^res(-\d+)?\.cloudinary\.com$")
_VERSION = re.compile(r"^v\d+$")
_TRANSFORMATION = re.compile(r"^[a-z]{1,3}_[^,]+(,[a-z]{1,3}_[^,]+)*$")


def is_remote_url(url: str | None, cdn_host: str = DEFAULT_CDN_HOST) -> bool:
    """Return True if *url* is served by the CDN host."""
    if not url:
        return False
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return False
    return (
        host == cdn_host.lower()
        or host == _CLOUDINARY_DOMAIN
        or host.endswith("." + _CLOUDINARY_DOMAIN)
    )


def extract_identifier(
    url: str | None,
    root_folder: str,
    cdn_host: str = DEFAULT_CDN_HOST,
) -> str | None:
    """Recover the CDN public id from a delivery URL.

    The delivery prefix (``<cloud>/<resource>/<type>`` on the shared host,
    ``<resource>/<type>`` on a private host) and any leading transformation
    or version segments are skipped. The id starts at the root folder
    segment and ends with the file name stem. Returns ``None`` for non-CDN
    URLs and URLs outside the root folder.
    """
    if not is_remote_url(url, cdn_host):
        return None

    parsed = urlparse(url)
    segments = [unquote(s) for s in parsed.path.split("/") if s]
    host = (parsed.hostname or "").lower()
    prefix_length = 3 if _SHARED_HOST.match(host) else 2

    marker = [part for part in root_folder.strip("/").split("/") if part]
    if not marker:
        return None

    segments = segments[prefix_length:]
    while (
        segments
        and segments[:len(marker)] != marker
        and (_VERSION.match(segments[0]) or _TRANSFORMATION.match(segments[0]))
    ):
        segments = segments[1:]
    if not segments:
        return None

    folders, filename = segments[:-1], segments[-1]
    start = _find_subsequence(folders, marker)
    if start is None:
        return None

    stem = filename.split(".")[0]
    if not stem:
        return None
    return "/".join(folders[start:] + [stem])


def _find_subsequence(items: list[str], sub: list[str]) -> int | None:
    for i in range(len(items) - len(sub) + 1):
        if items[i:i + len(sub)] == sub:
            return i
    return None


def _url_options(cloud_name: str, cdn_host: str) -> dict:
    options: dict = {"cloud_name": cloud_name, "secure": True}
    if cdn_host and cdn_host.lower() != DEFAULT_CDN_HOST:
        options["private_cdn"] = True
        options["secure_distribution"] = cdn_host
    return options


def build_delivery_url(
    identifier: str,
    cloud_name: str,
    cdn_host: str = DEFAULT_CDN_HOST,
) -> str:
    """Plain CDN URL for a public id, without transformations."""
    url, _ = cloudinary_url(identifier, **_url_options(cloud_name, cdn_host))
    return url


def build_optimized_url(
    identifier: str,
    cloud_name: str,
    cdn_host: str = DEFAULT_CDN_HOST,
    width: int | None = None,
    height: int | None = None,
    crop: str | None = None,
    quality: str | int | None = "auto",
    format: str | None = "auto",
) -> str:
    """CDN URL for a public id with delivery transformations applied.

    Pure string construction; no request is made to the CDN.
    """
    options = _url_options(cloud_name, cdn_host)
    if width is not None:
        options["width"] = width
    if height is not None:
        options["height"] = height
    if crop:
        options["crop"] = crop
    if quality:
        options["quality"] = quality
    if format:
        options["fetch_format"] = format
    url, _ = cloudinary_url(identifier, **options)
    return url


def build_local_url(identifier: str | int, prefix: str) -> str:
    return f"{prefix.rstrip('/')}/{identifier}"


def extract_local_identifier(url: str | None, prefix: str) -> str | None:
    """Recover the numeric row id from an app-relative file URL."""
    if not url:
        return None
    path = urlparse(url).path
    base = prefix.rstrip("/") + "/"
    if not path.startswith(base):
        return None
    candidate = path[len(base):].split("/")[0]
    return candidate if candidate.isdigit() else None
