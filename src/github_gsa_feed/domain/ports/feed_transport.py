"""Port: feed transport — delivers a finished feed document."""

from __future__ import annotations

from typing import BinaryIO, Protocol


class FeedDocument(Protocol):
    """What a transport needs from a built document."""

    @property
    def datasource(self) -> str: ...

    @property
    def feed_type(self) -> str: ...

    def open_stream(self) -> BinaryIO: ...


class FeedTransport(Protocol):
    """Abstract contract for pushing a document to the search appliance."""

    def send(self, document: FeedDocument) -> bool:
        """Deliver *document*; return whether the appliance accepted it."""
        ...
