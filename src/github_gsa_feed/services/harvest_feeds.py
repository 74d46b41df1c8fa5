"""Harvest-feeds use case — the main orchestration pipeline.

Builds the two feed documents of a run from whatever :class:`SourceApi` is
injected:

1. every user and every organization;
2. owner descriptions → ``incremental`` document (content supplied inline);
3. for each owner, each repository:
   * repository description → ``incremental`` document;
   * README → ``metadata-and-url`` document (the appliance crawls it).

Processing is strictly sequential.  A failure while handling one owner or one
repository is logged, recorded, and the loop carries on with the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from github_gsa_feed.domain.entities import Owner, Repository
from github_gsa_feed.domain.ports.source_api import Batch, ItemFailure, SourceApi
from github_gsa_feed.domain.value_objects import FeedType
from github_gsa_feed.services.feed_document import FeedDocumentBuilder

logger = logging.getLogger(__name__)


@dataclass
class HarvestResult:
    """Outcome of one run: both documents plus what was skipped on the way."""

    url_document: FeedDocumentBuilder
    content_document: FeedDocumentBuilder
    owners: int = 0
    repositories: int = 0
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def documents(self) -> tuple[FeedDocumentBuilder, FeedDocumentBuilder]:
        """Both documents, crawl-me feed first."""
        return (self.url_document, self.content_document)


class HarvestFeedsUseCase:
    """Orchestrates the GitHub → GSA feed documents pipeline.

    Parameters
    ----------
    source:
        Adapter that lists owners and repositories.
    datasource:
        GSA datasource both documents are bound to.
    """

    def __init__(self, source: SourceApi, datasource: str) -> None:
        self._source = source
        self._datasource = datasource

    # ── Public entry point ──────────────────────────────────────────────

    def execute(self) -> HarvestResult:
        """Run the full harvest and return the built documents."""
        result = HarvestResult(
            url_document=FeedDocumentBuilder(self._datasource, FeedType.METADATA_AND_URL),
            content_document=FeedDocumentBuilder(self._datasource, FeedType.INCREMENTAL),
        )

        owners = self._list("users", self._source.list_users, result)
        owners += self._list("organizations", self._source.list_organizations, result)
        result.owners = len(owners)

        for owner in owners:
            self._isolated(str(owner), result, self._add_owner, owner, result)

        logger.info("Fetching repositories from %d owners", len(owners))
        for owner in owners:
            self._isolated(str(owner), result, self._add_repositories, owner, result)

        logger.info(
            "%d repositories fetched; %d records for '%s', %d for '%s'; %d items skipped",
            result.repositories,
            len(result.url_document), result.url_document.feed_type.value,
            len(result.content_document), result.content_document.feed_type.value,
            len(result.failures),
        )
        return result

    # ── Steps ───────────────────────────────────────────────────────────

    def _list(
        self,
        label: str,
        fetch: Callable[[], Batch[Owner]],
        result: HarvestResult,
    ) -> list[Owner]:
        try:
            batch = fetch()
        except Exception as exc:
            logger.exception("Listing %s failed", label)
            result.failures.append(ItemFailure(identity=label, reason=str(exc)))
            return []
        if not batch.complete:
            logger.warning("Listing %s stopped early; continuing with %d owners", label, len(batch))
        result.failures.extend(batch.failures)
        return list(batch)

    def _add_owner(self, owner: Owner, result: HarvestResult) -> None:
        added = result.content_document.add_owner_record(self._source.fake_owner_url(owner), owner)
        if not added:
            logger.debug("No description record for %s", owner)

    def _add_repositories(self, owner: Owner, result: HarvestResult) -> None:
        batch = self._source.list_repositories(owner)
        result.failures.extend(batch.failures)
        for repo in batch:
            result.repositories += 1
            self._isolated(str(repo), result, self._add_repository, repo, result)

    def _add_repository(self, repo: Repository, result: HarvestResult) -> None:
        result.content_document.add_repository_record(self._source.fake_repository_url(repo), repo)
        result.url_document.add_readme_record(repo)

    # ── Helpers ─────────────────────────────────────────────────────────

    @staticmethod
    def _isolated(identity: str, result: HarvestResult, step: Callable[..., None], *args: object) -> None:
        """Run *step*; record and log any exception instead of propagating it."""
        try:
            step(*args)
        except Exception as exc:
            logger.exception("Failed processing %s", identity)
            result.failures.append(ItemFailure(identity=identity, reason=str(exc)))
