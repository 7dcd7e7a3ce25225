"""
Error taxonomy for the enrichment pipeline.

Input errors are raised synchronously to the caller submitting a job and
never create one. Everything else is raised inside job processing, caught
by the worker and fed into the retry policy; the message ends up in the
job's ``error_message``.
"""

from __future__ import annotations


class DiscSpecsError(Exception):
    """Base class for every pipeline error."""


class InvalidSourceUrlError(DiscSpecsError):
    """A supplied source URL is malformed or not on the source site."""


class FetchError(DiscSpecsError):
    """An outbound GET failed, either at the network level or with a non-2xx status."""

    def __init__(self, url: str, status_code: int | None = None, reason: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"Fetch failed with status {status_code}: {url}"
        else:
            message = f"Fetch failed: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NoMatchError(DiscSpecsError):
    """Search produced no usable candidate for the requested title."""


class PersistenceError(DiscSpecsError):
    """Writing a spec, rating or link failed."""
