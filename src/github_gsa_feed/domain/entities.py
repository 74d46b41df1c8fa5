"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

README_PATH_PLACEHOLDER = "{+path}"


def clean_text(value: object) -> str | None:
    """Normalise optional text: ``None``, blank and whitespace-only become ``None``."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


class OwnerKind(str, Enum):
    """Kind of account owning repositories."""

    USER = "User"
    ORGANIZATION = "Organization"


@dataclass(frozen=True, slots=True)
class Owner:
    """A GitHub user or organization.

    ``kind`` is supplied by whoever lists the owners: the organizations
    endpoint does not report it.
    """

    name: str
    kind: OwnerKind
    repository_list_url: str | None = None
    display_url: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if clean_text(self.name) is None:
            raise ValueError("Owner name must not be blank.")
        if not isinstance(self.kind, OwnerKind):
            object.__setattr__(self, "kind", OwnerKind(self.kind))
        object.__setattr__(self, "repository_list_url", clean_text(self.repository_list_url))
        object.__setattr__(self, "display_url", clean_text(self.display_url))
        object.__setattr__(self, "description", clean_text(self.description))

    @property
    def is_organization(self) -> bool:
        return self.kind is OwnerKind.ORGANIZATION

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.name}"


@dataclass(frozen=True, slots=True)
class ReadmeFile:
    """README descriptor of a repository.

    ``size`` is the byte count reported by the contents API; a missing or
    non-positive size means there is no usable README.
    """

    display_url: str
    raw_content_url: str | None = None
    size: int = -1

    def __post_init__(self) -> None:
        if clean_text(self.display_url) is None:
            raise ValueError("A README needs a display URL.")
        object.__setattr__(self, "raw_content_url", clean_text(self.raw_content_url))

    @property
    def is_usable(self) -> bool:
        return self.raw_content_url is not None and self.size > 0


@dataclass(frozen=True, slots=True)
class Repository:
    """A repository and the metadata republished for it.

    A README that is not usable is dropped at construction, so ``readme`` is
    either fully populated or ``None``.
    """

    owner: Owner
    name: str
    description: str | None = None
    language: str | None = None
    default_branch: str | None = None
    display_url: str | None = None
    contents_template_url: str | None = None
    last_updated_at: datetime | None = None
    fork_count: int = 0
    stargazer_count: int = 0
    readme: ReadmeFile | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.owner, Owner):
            raise ValueError("A repository must reference its owner.")
        if clean_text(self.name) is None:
            raise ValueError("Repository name must not be blank.")
        if self.fork_count < 0 or self.stargazer_count < 0:
            raise ValueError(f"Negative counters for {self.owner.name}/{self.name}.")
        for attr in ("description", "language", "default_branch", "display_url",
                     "contents_template_url"):
            object.__setattr__(self, attr, clean_text(getattr(self, attr)))
        if self.readme is not None and not self.readme.is_usable:
            object.__setattr__(self, "readme", None)

    @property
    def full_name(self) -> str:
        return f"{self.owner.name}/{self.name}"

    def readme_lookup_url(self, filename: str = "README.md") -> str | None:
        """Contents-API URL of *filename*, or ``None`` without a contents template."""
        if self.contents_template_url is None:
            return None
        return self.contents_template_url.replace(README_PATH_PLACEHOLDER, filename)

    def __str__(self) -> str:
        return self.full_name
