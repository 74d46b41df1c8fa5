"""Feed document builder — turns owners and repositories into GSA records.

One builder produces one feed document, bound at construction to a
datasource and a feed type.  Records accumulate in insertion order and
:meth:`FeedDocumentBuilder.serialize` renders them on demand, as often as
needed.

Inclusion rules
---------------
* owner record: needs a description *and* a display URL;
* repository record: needs a description;
* README record: needs a README (the appliance crawls its raw URL, so no
  content is sent).

Owner and repository records are keyed by a fake URL so the appliance indexes
the supplied description instead of crawling the real page; the real page is
only the display URL.
"""

from __future__ import annotations

import io
import logging
import sys
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import BinaryIO, Iterable, TextIO

from github_gsa_feed.domain.entities import Owner, Repository, clean_text
from github_gsa_feed.domain.exceptions import FeedDocumentError
from github_gsa_feed.domain.value_objects import (
    FeedRecord,
    FeedType,
    MetaEntry,
    MetaKey,
    MimeType,
    RecordType,
)
from github_gsa_feed.services.feed_xml import render

logger = logging.getLogger(__name__)

MetadataPairs = Iterable[tuple[str | MetaKey, object]]


def format_rfc822(moment: datetime) -> str:
    """Render *moment* as the appliance expects, e.g. ``Sun, 15 Nov 2015 04:58:08 +0000``.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment)


class FeedDocumentBuilder:
    """Accumulates :class:`FeedRecord` objects for one GSA feed document."""

    def __init__(self, datasource: str, feed_type: FeedType | str) -> None:
        name = clean_text(datasource)
        if name is None:
            raise FeedDocumentError("A feed document needs a datasource name.")
        try:
            self._feed_type = FeedType(feed_type)
        except ValueError as exc:
            raise FeedDocumentError(f"Unknown feed type: {feed_type!r}") from exc
        self._datasource = name.strip()
        self._records: list[FeedRecord] = []

    # ── Accessors ───────────────────────────────────────────────────────

    @property
    def datasource(self) -> str:
        return self._datasource

    @property
    def feed_type(self) -> FeedType:
        return self._feed_type

    @property
    def records(self) -> tuple[FeedRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return (
            f"FeedDocumentBuilder(datasource={self._datasource!r}, "
            f"feed_type={self._feed_type.value!r}, records={len(self._records)})"
        )

    # ── Record operations ───────────────────────────────────────────────

    def add_owner_record(self, fake_id: str, owner: Owner) -> bool:
        """Add the description of *owner*, keyed by *fake_id*."""
        if owner.description is None or owner.display_url is None:
            return False
        return self.add_record(
            url=fake_id,
            display_url=owner.display_url,
            mime_type=MimeType.PLAIN,
            content=owner.description,
            metadata=self._owner_metadata(owner),
        )

    def add_repository_record(self, fake_id: str, repo: Repository) -> bool:
        """Add the description of *repo*, keyed by *fake_id*."""
        if repo.description is None:
            return False
        return self.add_record(
            url=fake_id,
            display_url=repo.display_url,
            mime_type=MimeType.PLAIN,
            content=repo.description,
            metadata=self._repository_metadata(repo, RecordType.REPO),
        )

    def add_readme_record(self, repo: Repository) -> bool:
        """Add the README of *repo* without content, for the appliance to crawl."""
        if repo.readme is None:
            return False
        return self.add_record(
            url=repo.readme.raw_content_url,
            display_url=repo.readme.display_url,
            mime_type=MimeType.HTML,
            metadata=self._repository_metadata(repo, RecordType.FILE),
        )

    def add_record(
        self,
        url: str | None,
        display_url: str | None = None,
        mime_type: MimeType | str | None = MimeType.PLAIN,
        content: str | None = None,
        metadata: MetadataPairs = (),
    ) -> bool:
        """Append a record; return ``False`` when it has no identity.

        The record key is *url*, falling back to *display_url*.  Metadata
        pairs with a blank key or value are dropped.  A missing *mime_type*
        means ``text/plain``.
        """
        display_url = clean_text(display_url)
        key = clean_text(url) or display_url
        if key is None:
            logger.debug("Record without url or displayurl not added")
            return False

        entries = (MetaEntry.build(name, value) for name, value in metadata)
        self._records.append(
            FeedRecord(
                url=key,
                display_url=display_url,
                mime_type=self._mime_type(mime_type),
                content=content,
                metadata=tuple(entry for entry in entries if entry is not None),
            )
        )
        return True

    @staticmethod
    def _mime_type(value: MimeType | str | None) -> MimeType:
        if clean_text(value) is None:
            return MimeType.PLAIN
        try:
            return MimeType(value)
        except ValueError as exc:
            raise FeedDocumentError(f"Unsupported mimetype: {value!r}") from exc

    # ── Metadata ────────────────────────────────────────────────────────

    @staticmethod
    def _owner_metadata(owner: Owner) -> list[tuple[MetaKey, object]]:
        return [
            (MetaKey.OWNER, owner.name),
            (MetaKey.OWNER_TYPE, owner.kind),
            (MetaKey.RECORD_TYPE, RecordType.for_owner(owner.kind)),
        ]

    @staticmethod
    def _repository_metadata(repo: Repository, record_type: RecordType) -> list[tuple[MetaKey, object]]:
        pairs: list[tuple[MetaKey, object]] = [
            (MetaKey.OWNER, repo.owner.name),
            (MetaKey.OWNER_TYPE, repo.owner.kind),
            (MetaKey.REPO_NAME, repo.name),
        ]
        if repo.last_updated_at is not None:
            try:
                pairs.append((MetaKey.LAST_UPDATED, format_rfc822(repo.last_updated_at)))
            except (AttributeError, TypeError, ValueError, OverflowError) as exc:
                logger.debug("No %s for %s: %s", MetaKey.LAST_UPDATED.value, repo, exc)
        pairs += [
            (MetaKey.LANGUAGE, repo.language),
            (MetaKey.FORKS, repo.fork_count),
            (MetaKey.STARGAZERS, repo.stargazer_count),
            (MetaKey.RECORD_TYPE, record_type),
        ]
        return pairs

    # ── Output ──────────────────────────────────────────────────────────

    def serialize(self, *, pretty: bool = False) -> bytes:
        """Render every record added so far as a UTF-8 GSA feed document."""
        return render(self._datasource, self._feed_type, self._records, pretty=pretty)

    def open_stream(self) -> BinaryIO:
        """Readable byte stream of :meth:`serialize`, for upload."""
        return io.BytesIO(self.serialize())

    def write_to_file(self, path: str | Path) -> Path:
        """Write the document, indented, to *path*."""
        target = Path(path)
        target.write_bytes(self.serialize(pretty=True))
        logger.info(
            "XML for datasource '%s' and feed type '%s' written to %s",
            self._datasource, self._feed_type.value, target,
        )
        return target

    def write_to_console(self, stream: TextIO | None = None) -> None:
        """Write the document, indented, to *stream* (stdout by default)."""
        out = stream if stream is not None else sys.stdout
        out.write(self.serialize(pretty=True).decode("utf-8"))
        out.write("\n")
        logger.info(
            "XML for datasource '%s' and feed type '%s' written to console",
            self._datasource, self._feed_type.value,
        )
