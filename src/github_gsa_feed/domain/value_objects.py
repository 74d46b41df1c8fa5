"""Value objects — the closed vocabulary of the GSA feed protocol.

Every wire string of the feed lives here exactly once: feed types, record
types, metadata keys and MIME types are enumerations whose ``value`` is what
gets written to the XML.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from github_gsa_feed.domain.entities import OwnerKind, clean_text


class FeedType(str, Enum):
    """Kind of feed, as declared in ``<header><feedtype>``."""

    METADATA_AND_URL = "metadata-and-url"
    INCREMENTAL = "incremental"
    FULL = "full"


class RecordType(str, Enum):
    """Value of the ``recordType`` meta, used by the GSA front end for styling."""

    USER = "User"
    ORG = "Org"
    REPO = "Repo"
    FILE = "File"

    @classmethod
    def for_owner(cls, kind: OwnerKind) -> RecordType:
        return cls.ORG if kind is OwnerKind.ORGANIZATION else cls.USER


class MetaKey(str, Enum):
    OWNER = "owner"
    OWNER_TYPE = "ownerType"
    REPO_NAME = "reponame"
    LAST_UPDATED = "repolastupdated"
    LANGUAGE = "language"
    FORKS = "forks"
    STARGAZERS = "stargazers"
    RECORD_TYPE = "recordType"


class MimeType(str, Enum):
    PLAIN = "text/plain"
    HTML = "text/html"


@dataclass(frozen=True, slots=True)
class MetaEntry:
    """One ``<meta name=... content=...>`` pair."""

    name: str
    content: str

    @classmethod
    def build(cls, name: str | MetaKey | None, content: object) -> MetaEntry | None:
        """Return an entry, or ``None`` when either side is blank.

        The GSA rejects metadata with an empty ``content`` attribute, so such
        pairs are dropped rather than emitted.
        """
        key = clean_text(name.value if isinstance(name, MetaKey) else name)
        value = clean_text(content.value if isinstance(content, Enum) else content)
        if key is None or value is None:
            return None
        return cls(name=key, content=value)


@dataclass(frozen=True, slots=True)
class FeedRecord:
    """One ``<record>`` of a feed document.

    ``url`` is the document key used by the appliance; ``display_url`` is
    what search results link to.  ``content`` is ``None`` for records the
    appliance has to crawl itself.
    """

    url: str
    display_url: str | None
    mime_type: MimeType
    content: str | None = None
    metadata: tuple[MetaEntry, ...] = ()

    def meta(self, name: str | MetaKey) -> str | None:
        """Value of the metadata entry *name*, if present."""
        key = name.value if isinstance(name, MetaKey) else name
        for entry in self.metadata:
            if entry.name == key:
                return entry.content
        return None
