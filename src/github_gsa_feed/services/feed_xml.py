"""GSA feed XML serializer — a pure function of the accumulated records.

Output shape::

    <?xml version="1.0" encoding="UTF-8"?>
    <!DOCTYPE gsafeed PUBLIC "-//Google//DTD GSA Feeds//EN" "">
    <gsafeed>
      <header><datasource>..</datasource><feedtype>..</feedtype></header>
      <group>
        <record url=".." displayurl=".." mimetype="..">
          <content><![CDATA[..]]></content>
          <metadata><meta name=".." content=".."/></metadata>
        </record>
      </group>
    </gsafeed>
"""

from __future__ import annotations

import io
import re
from typing import Iterable, Iterator
from xml.dom import minidom
from xml.sax.saxutils import quoteattr

from github_gsa_feed.domain.value_objects import FeedRecord, FeedType

GSA_PUBLIC_ID = "-//Google//DTD GSA Feeds//EN"
GSA_ROOT_ELEMENT = "gsafeed"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
_DOCTYPE = f'<!DOCTYPE {GSA_ROOT_ELEMENT} PUBLIC "{GSA_PUBLIC_ID}" "">'
_CDATA_END = "]]>"
_INDENT = "  "

# Characters XML 1.0 cannot carry at all, lone surrogates included.
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def xml_safe(text: str) -> str:
    """Drop characters that would make the document ill-formed."""
    return _INVALID_XML_CHARS.sub("", text)


def cdata_chunks(text: str) -> Iterator[str]:
    """Split *text* so that no chunk contains ``]]>``.

    Adjacent CDATA sections concatenate back to the original text.
    """
    parts = text.split(_CDATA_END)
    last = len(parts) - 1
    for index, part in enumerate(parts):
        if index > 0:
            part = ">" + part
        if index < last:
            part = part + "]]"
        yield part


def render(
    datasource: str,
    feed_type: FeedType,
    records: Iterable[FeedRecord],
    *,
    pretty: bool = False,
) -> bytes:
    """Serialize a complete feed document to UTF-8 bytes."""
    doc = minidom.Document()
    try:
        root = doc.createElement(GSA_ROOT_ELEMENT)
        doc.appendChild(root)

        header = _child(doc, root, "header")
        _child(doc, header, "datasource").appendChild(doc.createTextNode(xml_safe(datasource)))
        _child(doc, header, "feedtype").appendChild(doc.createTextNode(feed_type.value))

        group = _child(doc, root, "group")
        for record in records:
            group.appendChild(_record_element(doc, record))

        body = _indented(root) if pretty else root.toxml()
    finally:
        doc.unlink()

    return "\n".join((_XML_DECLARATION, _DOCTYPE, body)).encode("utf-8")


def _child(doc: minidom.Document, parent: minidom.Element, tag: str) -> minidom.Element:
    element = doc.createElement(tag)
    parent.appendChild(element)
    return element


def _record_element(doc: minidom.Document, record: FeedRecord) -> minidom.Element:
    element = doc.createElement("record")
    # minidom keeps insertion order: url, displayurl, mimetype.
    element.setAttribute("url", xml_safe(record.url))
    if record.display_url is not None:
        element.setAttribute("displayurl", xml_safe(record.display_url))
    element.setAttribute("mimetype", record.mime_type.value)

    if record.content is not None:
        content = _child(doc, element, "content")
        for chunk in cdata_chunks(xml_safe(record.content)):
            content.appendChild(doc.createCDATASection(chunk))

    metadata = _child(doc, element, "metadata")
    for entry in record.metadata:
        meta = _child(doc, metadata, "meta")
        meta.setAttribute("name", xml_safe(entry.name))
        meta.setAttribute("content", xml_safe(entry.content))
    return element


def _indented(root: minidom.Element) -> str:
    out = io.StringIO()
    _write_indented(out, root, 0)
    return out.getvalue()


def _write_indented(out: io.StringIO, element: minidom.Element, depth: int) -> None:
    """Indent the element tree; ``<content>`` and leaf elements are written verbatim.

    Whitespace inside ``<content>`` would become part of the record content.
    """
    pad = _INDENT * depth
    children = [node for node in element.childNodes if node.nodeType == node.ELEMENT_NODE]
    if element.tagName == "content" or not children:
        out.write(pad)
        element.writexml(out)
        out.write("\n")
        return

    attributes = "".join(f" {name}={quoteattr(value)}" for name, value in element.attributes.items())
    out.write(f"{pad}<{element.tagName}{attributes}>\n")
    for child in children:
        _write_indented(out, child, depth + 1)
    out.write(f"{pad}</{element.tagName}>\n")
