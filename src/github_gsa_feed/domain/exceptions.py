"""Domain exception hierarchy.

Per-item failures (one request, one list element) are raised by the inner
layers and contained at the item boundary by the harvest pipeline.  Only
``ConfigurationError`` and ``FeedDocumentError`` are meant to end a run.
"""

from __future__ import annotations


class FeedClientError(Exception):
    """Base exception for the entire application."""


# ── Startup ─────────────────────────────────────────────────────────────────


class ConfigurationError(FeedClientError):
    """Missing or invalid startup parameters."""


# ── Source API errors ───────────────────────────────────────────────────────


class SourceApiError(FeedClientError):
    """A single request to the GitHub API failed (network or HTTP status)."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedPayloadError(FeedClientError):
    """One element of an API response could not be turned into an entity."""


# ── Feed errors ─────────────────────────────────────────────────────────────


class FeedDocumentError(FeedClientError):
    """The feed document could not be built or serialized."""
