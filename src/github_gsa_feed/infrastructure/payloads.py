"""Pydantic models for the GitHub API payloads we consume.

Only the fields that end up in a feed are declared; everything else in the
payload is ignored.  A ``ValidationError`` on one element means that element
is skipped.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class OwnerPayload(_Payload):
    """Element of ``/users`` or ``/organizations``.

    Organizations are listed without ``html_url``.
    """

    login: str
    repos_url: str | None = None
    description: str | None = None
    html_url: str | None = None


class RepositoryPayload(_Payload):
    """Element of an owner's ``repos_url`` list."""

    name: str
    html_url: str
    default_branch: str
    stargazers_count: int = Field(ge=0)
    forks_count: int = Field(ge=0)
    description: str | None = None
    language: str | None = None
    contents_url: str | None = None
    updated_at: str | None = None


class ReadmePayload(_Payload):
    """Response of ``/repos/{owner}/{repo}/contents/README.md``."""

    html_url: str | None = None
    download_url: str | None = None
    size: int = 0
