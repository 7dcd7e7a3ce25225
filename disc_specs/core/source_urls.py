"""
URL rules for the blu-ray.com catalog.

Release pages look like ``https://www.blu-ray.com/movies/Iron-Man-4K-Blu-ray/225134/``.
The canonical form (https, ``www`` host, path only, trailing slash) is the
cache key, so every URL entering the pipeline goes through
:func:`canonicalize_source_url`.
"""

from __future__ import annotations

import re
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from disc_specs.core.config import settings
from disc_specs.core.errors import InvalidSourceUrlError

SOURCE_HOSTS = frozenset({"www.blu-ray.com", "blu-ray.com"})

DISC_FORMATS = ("DVD", "Blu-ray", "4K UHD", "3D Blu-ray")

_RELEASE_PATH = re.compile(r"^/(?:movies/)?([^/]+)/(\d+)/?", re.IGNORECASE)


def is_source_url(url: str | None) -> bool:
    """True when *url* is an absolute http(s) URL on the source site."""
    if not url:
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and (parts.hostname or "") in SOURCE_HOSTS


def canonicalize_source_url(url: str) -> str:
    """
    Normalize a source-site URL into its cache key form.

    Raises:
        InvalidSourceUrlError: if *url* is not a source-site URL.
    """
    if not is_source_url(url):
        raise InvalidSourceUrlError(f"Invalid URL - must be from blu-ray.com: {url!r}")
    parts = urlsplit(url.strip())
    path = parts.path or "/"
    if not path.endswith("/") and "." not in path.rsplit("/", 1)[-1]:
        path += "/"
    return urlunsplit(("https", "www.blu-ray.com", path, "", ""))


def absolutize(href: str) -> str:
    """Resolve a relative catalog link against the source base URL."""
    return urljoin(settings.SOURCE_BASE_URL + "/", href)


def release_slug(url: str) -> str | None:
    """Return the edition slug of a release URL (``Iron-Man-4K-Blu-ray``), if any."""
    match = _RELEASE_PATH.match(urlsplit(url).path)
    return match.group(1) if match else None


def disc_format_from_url(url: str) -> str | None:
    """
    Classify the disc format from the release URL shape.

    Returns None when the URL carries no format hint, so the caller can
    fall back to page markers.
    """
    slug = release_slug(url)
    if slug is None:
        return None
    lower = f"-{slug.lower()}-"
    if "-4k-" in lower or "-uhd-" in lower:
        return "4K UHD"
    if "-3d-" in lower:
        return "3D Blu-ray"
    if "-dvd-" in lower:
        return "DVD"
    if "-blu-ray-" in lower:
        return "Blu-ray"
    return None


def build_search_query(title: str, year: int | None = None) -> str:
    return f"{title} {year}" if year else title


def build_search_url(query: str, section: str | None = None) -> str:
    """Quick-search URL for *query* in the configured catalog section."""
    return (
        f"{settings.SOURCE_BASE_URL}/search/?quicksearch=1"
        f"&quicksearch_country={settings.SEARCH_COUNTRY}"
        f"&quicksearch_keyword={quote(query, safe='')}"
        f"&section={section or settings.SEARCH_SECTION}"
    )
