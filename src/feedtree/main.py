from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional

from lxml import etree

from .extractors import AtomExtractor, FeedExtractor, RssExtractor
from .models import Channel
from .tags import Tag, classify_element

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_RE_XML_DECL_ENCODING = re.compile(
    r'(<\?xml[^>]*encoding=["\'])([^"\']+)(["\'][^>]*\?>)', re.IGNORECASE
)

_EXTRACTORS: dict[Tag, type[FeedExtractor]] = {
    Tag.RSS: RssExtractor,
    Tag.FEED: AtomExtractor,
}

_NON_FEED_MESSAGES: dict[str, str] = {
    "html": "Received HTML page instead of feed",
    "div": "Received HTML fragment instead of feed",
    "body": "Received HTML fragment instead of feed",
    "opml": "Received OPML document instead of feed (OPML is an outline format, not a feed)",
    "urlset": "Received XML sitemap instead of feed (sitemap is for search engines, not a feed)",
    "sitemapindex": "Received XML sitemap instead of feed (sitemap is for search engines, not a feed)",
}


class FeedParseError(ValueError):
    """Base class for documents that cannot be turned into a Channel."""


class DocumentFormatError(FeedParseError):
    """The document is well-formed XML but neither an RSS nor an Atom feed."""


class FeedSyntaxError(FeedParseError):
    """The document is not well-formed XML."""

    def __init__(self, message: str, lineno: Optional[int] = None) -> None:
        super().__init__(message)
        self.lineno = lineno


def _ensure_utf8_xml_declaration(content: str) -> str:
    """Ensure the XML declaration's encoding matches the UTF-8 bytes we emit."""
    if not content.lstrip().startswith("<?xml"):
        return content
    return _RE_XML_DECL_ENCODING.sub(r"\1utf-8\3", content, count=1)


def _prepare_xml_bytes(xml_content: str | bytes) -> bytes:
    if isinstance(xml_content, str):
        # lxml refuses str input carrying an encoding declaration
        xml_content = _ensure_utf8_xml_declaration(xml_content.lstrip()).encode(
            "utf-8", errors="replace"
        )

    cleaned = xml_content.lstrip()
    if cleaned.startswith(b"\xef\xbb\xbf"):
        cleaned = cleaned[3:].lstrip()
    if not cleaned:
        raise DocumentFormatError("Empty content")

    preview_lower = cleaned[:2000].lower()
    if preview_lower.startswith(b"<!doctype html") or preview_lower.startswith(
        b"<html"
    ):
        raise DocumentFormatError(
            "Content appears to be HTML, not a valid RSS/Atom feed"
        )
    return cleaned


def _tokenize(xml_content: bytes) -> list[tuple[str, _Element]]:
    """Run the whole document through lxml's pull parser.

    The event list is only returned once the document has been fully
    tokenized, so a syntax error never leaves a half-extracted channel behind.
    lxml still builds its element tree alongside the events; extraction makes
    one forward pass over them and never searches that tree.
    """
    parser = etree.XMLPullParser(
        events=("start", "end"),
        remove_comments=True,
        remove_pis=True,
        collect_ids=False,
        resolve_entities=False,
    )
    events: list[tuple[str, _Element]] = []
    try:
        parser.feed(xml_content)
        events.extend(parser.read_events())
        parser.close()
    except etree.XMLSyntaxError as e:
        raise FeedSyntaxError(
            f"Failed to parse XML content: {str(e)}", lineno=e.lineno
        ) from e
    events.extend(parser.read_events())
    return events


def _root_tag_local(root: _Element) -> str:
    tag = root.tag if isinstance(root.tag, str) else ""
    return tag.split("}")[-1].lower() if "}" in tag else tag.lower()


def _select_extractor(root: _Element) -> type[FeedExtractor]:
    extractor_cls = _EXTRACTORS.get(classify_element(root))
    if extractor_cls is not None:
        return extractor_cls

    message = _NON_FEED_MESSAGES.get(_root_tag_local(root))
    if message is not None:
        raise DocumentFormatError(message)
    raise DocumentFormatError(f"Unknown feed type: {root.tag}")


def parse(
    source: str | bytes,
    *,
    include_content: bool = True,
    include_categories: bool = True,
    include_podcast: bool = True,
) -> Channel:
    """Parse an RSS 2.0 or Atom document into an immutable Channel.

    Args:
        source: Complete XML document, as text or encoded bytes
        include_content: Keep each article's full content blob
        include_categories: Collect article categories
        include_podcast: Collect podcast (iTunes) channel and article data

    Returns:
        Channel holding its articles in document order

    Raises:
        FeedSyntaxError: If the document is not well-formed XML
        DocumentFormatError: If the document is empty or neither RSS nor Atom
    """
    events = _tokenize(_prepare_xml_bytes(source))
    if not events:
        raise DocumentFormatError("Document has no root element")

    extractor_cls = _select_extractor(events[0][1])
    logger.debug("Dispatching document to %s", extractor_cls.__name__)
    extractor = extractor_cls(
        include_content=include_content,
        include_categories=include_categories,
        include_podcast=include_podcast,
    )
    return extractor.extract(events)
