"""Outbound GETs against the source site.

The fetcher only talks to the network. Pacing lives in
:mod:`disc_specs.core.rate_limiter` and is applied by the worker, so that
cache hits never pay for it.
"""

import logging
import random

import requests

from disc_specs.core.config import settings
from disc_specs.core.errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)


def get_random_user_agent() -> str:
    return random.choice(USER_AGENTS)


def browser_headers(user_agent: str | None = None) -> dict[str, str]:
    """Headers a desktop browser sends on a top-level navigation."""
    return {
        "User-Agent": user_agent or get_random_user_agent(),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }


def fetch_html(url: str, session: requests.Session | None = None) -> str:
    """
    GET *url* with browser headers and return the body text.

    Raises:
        FetchError: on a network failure (no status) or a non-2xx status.
    """
    http = session or requests
    try:
        res = http.get(url, headers=browser_headers(), timeout=settings.SCRAPE_REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        logger.warning("Network error fetching %s: %s", url, exc)
        raise FetchError(url, reason=str(exc)) from exc

    if not 200 <= res.status_code < 300:
        logger.warning("Fetch of %s returned HTTP %s", url, res.status_code)
        raise FetchError(url, status_code=res.status_code)

    logger.info("Fetched %s (%d chars)", url, len(res.text))
    return res.text
