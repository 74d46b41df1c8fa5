"""Port: source API — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, Protocol, TypeVar

from github_gsa_feed.domain.entities import Owner, ReadmeFile, Repository

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ItemFailure:
    """An element that was skipped, and why."""

    identity: str
    reason: str


@dataclass
class Batch(Generic[T]):
    """Entities converted from one list endpoint plus the elements that were skipped.

    ``complete`` is false when pagination stopped early on a failed page.
    """

    items: list[T] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)
    complete: bool = True

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class SourceApi(Protocol):
    """Abstract contract for harvesting owners and repositories."""

    def list_users(self) -> Batch[Owner]:
        """Return every user account."""
        ...

    def list_organizations(self) -> Batch[Owner]:
        """Return every organization."""
        ...

    def list_repositories(self, owner: Owner) -> Batch[Repository]:
        """Return every repository of *owner*, each enriched with its README."""
        ...

    def get_readme(self, url: str) -> ReadmeFile | None:
        """Look up one README descriptor; ``None`` on any failure."""
        ...

    def fake_owner_url(self, owner: Owner) -> str:
        """Synthetic, never-crawled document key for an owner record."""
        ...

    def fake_repository_url(self, repo: Repository) -> str:
        """Synthetic, never-crawled document key for a repository record."""
        ...
