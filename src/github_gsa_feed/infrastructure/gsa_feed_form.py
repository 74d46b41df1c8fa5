"""GSA feed form adapter — implements the FeedTransport port.

Mimics the appliance's upload form::

    <form enctype="multipart/form-data" method="POST"
          action="http://<APPLIANCE>:19900/xmlfeed">
      <input type="text" name="datasource">
      <input type="radio" name="feedtype" value="full|incremental|metadata-and-url">
      <input type="file" name="data">
    </form>
"""

from __future__ import annotations

import logging
from enum import Enum
from urllib.parse import urlsplit

import httpx

from github_gsa_feed.domain.ports.feed_transport import FeedDocument

logger = logging.getLogger(__name__)

_HTTP_OK = 200
DEFAULT_FEED_PORT = 19900
DEFAULT_FEED_PATH = "/xmlfeed"


def feed_endpoint(gsa_url: str, port: int = DEFAULT_FEED_PORT, path: str = DEFAULT_FEED_PATH) -> str:
    """``<scheme>://<host>:<port><path>`` for the appliance at *gsa_url*.

    A port already present in *gsa_url* is replaced by *port*.
    """
    parts = urlsplit(gsa_url.strip())
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Invalid GSA address: {gsa_url!r}")
    host = f"[{parts.hostname}]" if ":" in parts.hostname else parts.hostname
    return f"{parts.scheme}://{host}:{port}/{path.lstrip('/')}"


class GsaFeedForm:
    """Posts feed documents to the appliance as a multipart form."""

    def __init__(
        self,
        client: httpx.Client,
        gsa_url: str,
        *,
        port: int = DEFAULT_FEED_PORT,
        path: str = DEFAULT_FEED_PATH,
    ) -> None:
        self._client = client
        self._endpoint = feed_endpoint(gsa_url, port, path)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def send(self, document: FeedDocument) -> bool:
        """POST *document*; ``True`` only if the appliance answered 200."""
        feed_type = _wire(document.feed_type)
        try:
            with document.open_stream() as stream:
                response = self._client.post(
                    self._endpoint,
                    data={"feedtype": feed_type, "datasource": document.datasource},
                    files={"data": ("feed.xml", stream, "text/xml")},
                )
        except httpx.HTTPError as exc:
            logger.error("Network error posting feed to %s: %s", self._endpoint, exc)
            return False

        if response.status_code != _HTTP_OK:
            logger.error(
                "GSA (%s) returned HTTP %d for datasource '%s' and feed type '%s'",
                self._endpoint, response.status_code, document.datasource, feed_type,
            )
            return False

        logger.info(
            "XML for datasource '%s' and feed type '%s' posted to %s",
            document.datasource, feed_type, self._endpoint,
        )
        return True


def _wire(value: object) -> str:
    return value.value if isinstance(value, Enum) else str(value)
