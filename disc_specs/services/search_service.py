"""
Search the source catalog and pick the release page that best matches a title.

The search results markup has changed shape over time, so parsing tries a
short list of patterns in order and keeps the results of the first one that
matches anything. Patterns are applied line by line: a result link and its
year are always on the same line of the results page.
"""

import asyncio
import logging
import re
from collections.abc import Callable
from typing import Optional

from disc_specs.core.config import settings
from disc_specs.core.errors import NoMatchError
from disc_specs.core.http_fetcher import fetch_html
from disc_specs.core.markup import strip_markup
from disc_specs.core.source_urls import absolutize, build_search_query, build_search_url
from disc_specs.dtos.scrape_job_dto import SearchCandidate

logger = logging.getLogger(__name__)

# Each pattern captures (href, title, year).
SEARCH_PATTERNS = (
    re.compile(r'<a[^>]+href="(/movies/[^"]+)"[^>]*>.*?<b>([^<]+)</b>.*?\((\d{4})\)', re.IGNORECASE),
    re.compile(
        r'<a[^>]+href="(/movies/[^"]+)"[^>]*>[^<]*<[^>]+>([^<]+)</[^>]+>[^(]*\((\d{4})\)',
        re.IGNORECASE,
    ),
    re.compile(r'href="(/movies/[^"]+)"[^>]*>([^<]+)<.*?(\d{4})', re.IGNORECASE),
)


def parse_search_results(html: str, limit: Optional[int] = None) -> list[SearchCandidate]:
    """
    Extract candidates from a search results page, in page order.

    Args:
        html: Search results page body
        limit: Maximum candidates to return (defaults to SEARCH_RESULT_LIMIT)

    Returns:
        Up to *limit* candidates with absolute URLs; empty if nothing matched
    """
    limit = settings.SEARCH_RESULT_LIMIT if limit is None else limit

    for pattern in SEARCH_PATTERNS:
        candidates: list[SearchCandidate] = []
        seen: set[str] = set()
        for match in pattern.finditer(html):
            href, raw_title, raw_year = match.groups()
            url = absolutize(href)
            title = strip_markup(raw_title)
            if url in seen or not title:
                continue
            seen.add(url)
            candidates.append(SearchCandidate(url=url, title=title, year=int(raw_year)))
        if candidates:
            return candidates[:limit]
    return []


def select_best_match(
    candidates: list[SearchCandidate], title: str, year: Optional[int] = None
) -> SearchCandidate:
    """
    Choose one candidate, deterministically.

    With a year: the first candidate within one year of it. When there is
    no year, or no candidate is that close, the first whose title contains, or is contained in, the wanted title
    (case-insensitive). Failing both, the first candidate.

    Raises:
        NoMatchError: if *candidates* is empty.
    """
    if not candidates:
        raise NoMatchError("No results to select from")

    if year is not None:
        for candidate in candidates:
            if candidate.year is not None and abs(candidate.year - year) <= 1:
                return candidate

    wanted = title.lower()
    for candidate in candidates:
        found = candidate.title.lower()
        if wanted in found or found in wanted:
            return candidate

    return candidates[0]


class SearchService:
    """Runs a catalog search through the fetcher."""

    def __init__(self, fetcher: Callable[[str], str] = fetch_html) -> None:
        self.fetcher = fetcher

    async def search(
        self, title: str, year: Optional[int] = None, *, query: Optional[str] = None
    ) -> list[SearchCandidate]:
        """Search the catalog with *query*, or with title and year when no query is given."""
        url = build_search_url(query or build_search_query(title, year))
        html = await asyncio.to_thread(self.fetcher, url)
        candidates = parse_search_results(html)
        logger.info("Search for %r (%s) returned %d candidates", title, year, len(candidates))
        return candidates
