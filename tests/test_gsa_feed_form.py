import io

import httpx
import pytest

from github_gsa_feed.domain.ports.feed_transport import FeedTransport
from github_gsa_feed.domain.value_objects import FeedType
from github_gsa_feed.infrastructure.gsa_feed_form import GsaFeedForm, feed_endpoint
from github_gsa_feed.services.feed_document import FeedDocumentBuilder


def _document():
    builder = FeedDocumentBuilder("github", FeedType.METADATA_AND_URL)
    builder.add_record("https://gh/raw/acme/rocket/master/README.md", "https://gh/acme/rocket")
    return builder


def test_feed_endpoint_uses_fixed_port_and_path():
    assert feed_endpoint("http://gsa.test") == "http://gsa.test:19900/xmlfeed"
    assert feed_endpoint("http://gsa.test/") == "http://gsa.test:19900/xmlfeed"
    assert feed_endpoint("http://gsa.test:8080", port=1234, path="feeds") == "http://gsa.test:1234/feeds"
    with pytest.raises(ValueError):
        feed_endpoint("gsa.test")


def test_send_posts_multipart_form():
    seen = {}

    def handler(request):
        request.read()
        seen["url"] = str(request.url)
        seen["type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, text="Success")

    document = _document()
    form = GsaFeedForm(httpx.Client(transport=httpx.MockTransport(handler)), "http://gsa.test")

    assert form.send(document)
    assert seen["url"] == "http://gsa.test:19900/xmlfeed"
    assert seen["type"].startswith("multipart/form-data")
    body = seen["body"]
    assert b'name="feedtype"' in body
    assert b"metadata-and-url" in body
    assert b'name="datasource"' in body
    assert b'name="data"; filename="feed.xml"' in body
    assert document.serialize() in body


def test_send_reports_rejection():
    def handler(request):
        return httpx.Response(500, text="Error")

    form = GsaFeedForm(httpx.Client(transport=httpx.MockTransport(handler)), "http://gsa.test")
    assert not form.send(_document())


def test_send_reports_network_failure():
    def handler(request):
        raise httpx.ConnectError("no route to host", request=request)

    form = GsaFeedForm(httpx.Client(transport=httpx.MockTransport(handler)), "http://gsa.test")
    assert not form.send(_document())


class _StaticDocument:
    datasource = "github"
    feed_type = "full"

    def open_stream(self):
        return io.BytesIO(b"<gsafeed/>")


def test_send_accepts_any_feed_document():
    seen = {}

    def handler(request):
        request.read()
        seen["body"] = request.content
        return httpx.Response(200)

    transport: FeedTransport = GsaFeedForm(
        httpx.Client(transport=httpx.MockTransport(handler)), "http://gsa.test"
    )
    assert transport.send(_StaticDocument())
    assert b"<gsafeed/>" in seen["body"]
    assert b"full" in seen["body"]
