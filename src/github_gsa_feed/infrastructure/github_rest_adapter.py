"""GitHub REST API adapter — implements the SourceApi port."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, TypeVar

import httpx
from pydantic import ValidationError

from github_gsa_feed.domain.entities import (
    Owner,
    OwnerKind,
    ReadmeFile,
    Repository,
    clean_text,
)
from github_gsa_feed.domain.exceptions import MalformedPayloadError
from github_gsa_feed.domain.ports.source_api import Batch, ItemFailure
from github_gsa_feed.infrastructure.pagination import PaginatedFetcher
from github_gsa_feed.infrastructure.payloads import (
    OwnerPayload,
    ReadmePayload,
    RepositoryPayload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_API_PREFIX = "api/v3/"
_FAKE_URL_SEGMENT = "description"
# GitHub timestamps are always UTC, e.g. "2015-08-20T15:45:46Z".
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def normalize_base_url(url: str) -> str:
    """Return *url* stripped, with exactly one trailing slash."""
    url = url.strip()
    if not url:
        raise ValueError("GitHub base URL must not be empty.")
    return url.rstrip("/") + "/"


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitHub ``updated_at`` value into an aware UTC datetime."""
    if clean_text(value) is None:
        return None
    return datetime.strptime(value.strip(), _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def convert_element(
    convert: Callable[[Any], T], element: Any, identity: str
) -> T | ItemFailure:
    """Run *convert* on one list element, turning a bad payload into an ``ItemFailure``."""
    try:
        return convert(element)
    except MalformedPayloadError as exc:
        return ItemFailure(identity=identity, reason=str(exc))


def _element_identity(element: Any, key: str, fallback: str) -> str:
    if isinstance(element, dict) and clean_text(element.get(key)) is not None:
        return str(element[key])
    return fallback


class GitHubRestAdapter:
    """Concrete SourceApi backed by the GitHub (Enterprise) v3 REST API."""

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        *,
        per_page: int = 100,
        max_pages: int | None = 1000,
        readme_filename: str = "README.md",
        user_agent: str = "github-gsa-feed/1.0",
    ) -> None:
        self._base_url = normalize_base_url(base_url)
        self._per_page = per_page
        self._readme_filename = readme_filename
        self._fetcher = PaginatedFetcher(
            client,
            headers={
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": user_agent,
            },
            max_pages=max_pages,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    # ── Owners ──────────────────────────────────────────────────────────

    def list_users(self) -> Batch[Owner]:
        """GET /api/v3/users → [Owner]."""
        return self._list_owners(self._endpoint("users"), OwnerKind.USER)

    def list_organizations(self) -> Batch[Owner]:
        """GET /api/v3/organizations → [Owner].

        That endpoint does not say what it lists, so the kind is set here.
        """
        return self._list_owners(self._endpoint("organizations"), OwnerKind.ORGANIZATION)

    def _list_owners(self, url: str, kind: OwnerKind) -> Batch[Owner]:
        fetched = self._fetcher.fetch_all(url)
        batch: Batch[Owner] = Batch(complete=fetched.complete)
        self._collect(
            batch,
            fetched.items,
            lambda element: self._to_owner(element, kind),
            key="login",
            label=kind.value,
        )
        logger.info("Fetched %d %s owners (%d skipped)", len(batch), kind.value, len(batch.failures))
        return batch

    def _to_owner(self, element: Any, kind: OwnerKind) -> Owner:
        try:
            payload = OwnerPayload.model_validate(element)
            # Only users carry html_url; organizations live at <base>/<name>.
            display_url = clean_text(payload.html_url) or f"{self._base_url}{payload.login}"
            return Owner(
                name=payload.login,
                kind=kind,
                repository_list_url=payload.repos_url,
                display_url=display_url,
                description=payload.description,
            )
        except (ValidationError, ValueError) as exc:
            raise MalformedPayloadError(f"Unusable owner payload: {exc}") from exc

    # ── Repositories ────────────────────────────────────────────────────

    def list_repositories(self, owner: Owner) -> Batch[Repository]:
        """GET owner.repos_url → [Repository], each with its README looked up."""
        batch: Batch[Repository] = Batch()
        if owner.repository_list_url is None:
            logger.error("No repository list URL for %s", owner)
            batch.failures.append(ItemFailure(identity=str(owner), reason="no repository list URL"))
            return batch

        fetched = self._fetcher.fetch_all(owner.repository_list_url)
        batch.complete = fetched.complete
        self._collect(
            batch,
            fetched.items,
            lambda element: self._to_repository(owner, element),
            key="name",
            label=owner.name,
        )
        logger.debug("Fetched %d repositories of %s", len(batch), owner)
        return batch

    def _to_repository(self, owner: Owner, element: Any) -> Repository:
        try:
            payload = RepositoryPayload.model_validate(element)
        except ValidationError as exc:
            raise MalformedPayloadError(f"Unusable repository payload: {exc}") from exc

        try:
            last_updated_at = parse_timestamp(payload.updated_at)
        except ValueError as exc:
            logger.warning(
                "Unparsable updated_at %r for %s/%s: %s",
                payload.updated_at, owner.name, payload.name, exc,
            )
            last_updated_at = None

        try:
            repo = Repository(
                owner=owner,
                name=payload.name,
                description=payload.description,
                language=payload.language,
                default_branch=payload.default_branch,
                display_url=payload.html_url,
                contents_template_url=payload.contents_url,
                last_updated_at=last_updated_at,
                fork_count=payload.forks_count,
                stargazer_count=payload.stargazers_count,
            )
        except ValueError as exc:
            raise MalformedPayloadError(f"Unusable repository payload: {exc}") from exc

        readme_url = repo.readme_lookup_url(self._readme_filename)
        if readme_url is None:
            return repo
        return replace(repo, readme=self.get_readme(readme_url))

    # ── README ──────────────────────────────────────────────────────────

    def get_readme(self, url: str) -> ReadmeFile | None:
        """GET /repos/{owner}/{repo}/contents/README.md → ReadmeFile, or None."""
        data = self._fetcher.fetch_object(url)
        if data is None:
            return None
        try:
            payload = ReadmePayload.model_validate(data)
        except ValidationError as exc:
            logger.warning("Unusable README payload from %s: %s", url, exc)
            return None
        if clean_text(payload.html_url) is None:
            logger.debug("README at %s has no html_url", url)
            return None
        return ReadmeFile(
            display_url=payload.html_url,
            raw_content_url=payload.download_url,
            size=payload.size,
        )

    # ── Fake document keys ──────────────────────────────────────────────

    def fake_owner_url(self, owner: Owner) -> str:
        """``<base>description/<owner>``: a key the appliance never crawls."""
        return f"{self._base_url}{_FAKE_URL_SEGMENT}/{owner.name}"

    def fake_repository_url(self, repo: Repository) -> str:
        """``<base>description/<owner>/<repo>``: a key the appliance never crawls."""
        return f"{self._base_url}{_FAKE_URL_SEGMENT}/{repo.owner.name}/{repo.name}"

    # ── Helpers ─────────────────────────────────────────────────────────

    def _endpoint(self, path: str) -> str:
        return f"{self._base_url}{_API_PREFIX}{path}?per_page={self._per_page}"

    @staticmethod
    def _collect(
        batch: Batch[T],
        elements: Iterable[Any],
        convert: Callable[[Any], T],
        *,
        key: str,
        label: str,
    ) -> None:
        for index, element in enumerate(elements):
            identity = _element_identity(element, key, f"{label}[{index}]")
            outcome = convert_element(convert, element, identity)
            if isinstance(outcome, ItemFailure):
                logger.warning("Skipping %s: %s", outcome.identity, outcome.reason)
                batch.failures.append(outcome)
            else:
                batch.items.append(outcome)
