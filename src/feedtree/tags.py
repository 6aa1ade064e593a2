"""Tag/namespace resolution.

Every element the extractors see is reduced to a member of the closed
:class:`Tag` vocabulary. The grammar lives in plain lookup tables keyed by
``(Namespace, local_name)`` so the extractors never compare raw strings.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from lxml.etree import _Element


class Namespace(enum.Enum):
    NONE = "none"
    ATOM = "atom"
    PODCAST = "itunes"
    MEDIA = "media"
    CONTENT = "content"
    SYNDICATION = "sy"
    DUBLIN_CORE = "dc"


class Tag(enum.Enum):
    UNKNOWN = "unknown"

    # Document structure
    RSS = "rss"
    CHANNEL = "channel"
    ITEM = "item"
    FEED = "atom:feed"
    ENTRY = "atom:entry"

    # RSS channel and item vocabulary
    TITLE = "title"
    LINK = "link"
    DESCRIPTION = "description"
    IMAGE = "image"
    URL = "url"
    LAST_BUILD_DATE = "lastBuildDate"
    UPDATE_PERIOD = "sy:updatePeriod"
    AUTHOR = "author"
    PUB_DATE = "pubDate"
    CONTENT = "content:encoded"
    CATEGORY = "category"
    GUID = "guid"
    SOURCE = "source"
    ENCLOSURE = "enclosure"
    TEXT_INPUT = "textInput"
    MEDIA_CONTENT = "media:content"
    MEDIA_THUMBNAIL = "media:thumbnail"

    # Atom vocabulary
    ATOM_TITLE = "atom:title"
    ATOM_LINK = "atom:link"
    ATOM_SUBTITLE = "atom:subtitle"
    ATOM_ICON = "atom:icon"
    ATOM_LOGO = "atom:logo"
    ATOM_UPDATED = "atom:updated"
    ATOM_PUBLISHED = "atom:published"
    ATOM_SUMMARY = "atom:summary"
    ATOM_CONTENT = "atom:content"
    ATOM_ID = "atom:id"
    ATOM_AUTHOR = "atom:author"
    ATOM_CATEGORY = "atom:category"
    ATOM_SOURCE = "atom:source"

    # Podcast (iTunes) namespace, channel and item level
    PODCAST_EXPLICIT = "itunes:explicit"
    PODCAST_TYPE = "itunes:type"
    PODCAST_SUBTITLE = "itunes:subtitle"
    PODCAST_AUTHOR = "itunes:author"
    PODCAST_SUMMARY = "itunes:summary"
    PODCAST_OWNER = "itunes:owner"
    PODCAST_OWNER_NAME = "itunes:name"
    PODCAST_OWNER_EMAIL = "itunes:email"
    PODCAST_IMAGE = "itunes:image"
    PODCAST_CATEGORY = "itunes:category"
    PODCAST_NEW_FEED_URL = "itunes:new-feed-url"
    PODCAST_KEYWORDS = "itunes:keywords"
    PODCAST_EPISODE_TYPE = "itunes:episodeType"
    PODCAST_DURATION = "itunes:duration"


# Keys are lowercased: namespace URIs and prefixes match case-insensitively.
_NAMESPACE_URIS: dict[str, Namespace] = {
    "http://backend.userland.com/rss2": Namespace.NONE,
    "http://www.w3.org/2005/atom": Namespace.ATOM,
    "https://www.w3.org/2005/atom": Namespace.ATOM,
    "http://purl.org/atom/ns#": Namespace.ATOM,
    "http://www.itunes.com/dtds/podcast-1.0.dtd": Namespace.PODCAST,
    "https://www.itunes.com/dtds/podcast-1.0.dtd": Namespace.PODCAST,
    "http://search.yahoo.com/mrss/": Namespace.MEDIA,
    "http://search.yahoo.com/mrss": Namespace.MEDIA,
    "http://purl.org/rss/1.0/modules/content/": Namespace.CONTENT,
    "http://purl.org/rss/1.0/modules/syndication/": Namespace.SYNDICATION,
    "http://purl.org/dc/elements/1.1/": Namespace.DUBLIN_CORE,
}

_NAMESPACE_PREFIXES: dict[str, Namespace] = {
    "atom": Namespace.ATOM,
    "itunes": Namespace.PODCAST,
    "media": Namespace.MEDIA,
    "content": Namespace.CONTENT,
    "sy": Namespace.SYNDICATION,
    "dc": Namespace.DUBLIN_CORE,
}

# Local names are matched exactly.
_GRAMMAR: dict[tuple[Namespace, str], Tag] = {
    (Namespace.NONE, "rss"): Tag.RSS,
    (Namespace.NONE, "channel"): Tag.CHANNEL,
    (Namespace.NONE, "item"): Tag.ITEM,
    (Namespace.NONE, "title"): Tag.TITLE,
    (Namespace.NONE, "link"): Tag.LINK,
    (Namespace.NONE, "description"): Tag.DESCRIPTION,
    (Namespace.NONE, "image"): Tag.IMAGE,
    (Namespace.NONE, "url"): Tag.URL,
    (Namespace.NONE, "lastBuildDate"): Tag.LAST_BUILD_DATE,
    (Namespace.NONE, "author"): Tag.AUTHOR,
    (Namespace.NONE, "pubDate"): Tag.PUB_DATE,
    (Namespace.NONE, "category"): Tag.CATEGORY,
    (Namespace.NONE, "guid"): Tag.GUID,
    (Namespace.NONE, "source"): Tag.SOURCE,
    (Namespace.NONE, "enclosure"): Tag.ENCLOSURE,
    (Namespace.NONE, "textInput"): Tag.TEXT_INPUT,
    (Namespace.SYNDICATION, "updatePeriod"): Tag.UPDATE_PERIOD,
    (Namespace.CONTENT, "encoded"): Tag.CONTENT,
    (Namespace.DUBLIN_CORE, "creator"): Tag.AUTHOR,
    (Namespace.MEDIA, "content"): Tag.MEDIA_CONTENT,
    (Namespace.MEDIA, "thumbnail"): Tag.MEDIA_THUMBNAIL,
    (Namespace.ATOM, "feed"): Tag.FEED,
    (Namespace.ATOM, "entry"): Tag.ENTRY,
    (Namespace.ATOM, "title"): Tag.ATOM_TITLE,
    (Namespace.ATOM, "link"): Tag.ATOM_LINK,
    (Namespace.ATOM, "subtitle"): Tag.ATOM_SUBTITLE,
    (Namespace.ATOM, "tagline"): Tag.ATOM_SUBTITLE,
    (Namespace.ATOM, "icon"): Tag.ATOM_ICON,
    (Namespace.ATOM, "logo"): Tag.ATOM_LOGO,
    (Namespace.ATOM, "updated"): Tag.ATOM_UPDATED,
    (Namespace.ATOM, "modified"): Tag.ATOM_UPDATED,
    (Namespace.ATOM, "published"): Tag.ATOM_PUBLISHED,
    (Namespace.ATOM, "issued"): Tag.ATOM_PUBLISHED,
    (Namespace.ATOM, "summary"): Tag.ATOM_SUMMARY,
    (Namespace.ATOM, "content"): Tag.ATOM_CONTENT,
    (Namespace.ATOM, "id"): Tag.ATOM_ID,
    (Namespace.ATOM, "author"): Tag.ATOM_AUTHOR,
    (Namespace.ATOM, "category"): Tag.ATOM_CATEGORY,
    (Namespace.ATOM, "source"): Tag.ATOM_SOURCE,
    (Namespace.PODCAST, "explicit"): Tag.PODCAST_EXPLICIT,
    (Namespace.PODCAST, "type"): Tag.PODCAST_TYPE,
    (Namespace.PODCAST, "subtitle"): Tag.PODCAST_SUBTITLE,
    (Namespace.PODCAST, "author"): Tag.PODCAST_AUTHOR,
    (Namespace.PODCAST, "summary"): Tag.PODCAST_SUMMARY,
    (Namespace.PODCAST, "owner"): Tag.PODCAST_OWNER,
    (Namespace.PODCAST, "name"): Tag.PODCAST_OWNER_NAME,
    (Namespace.PODCAST, "email"): Tag.PODCAST_OWNER_EMAIL,
    (Namespace.PODCAST, "image"): Tag.PODCAST_IMAGE,
    (Namespace.PODCAST, "category"): Tag.PODCAST_CATEGORY,
    (Namespace.PODCAST, "new-feed-url"): Tag.PODCAST_NEW_FEED_URL,
    (Namespace.PODCAST, "keywords"): Tag.PODCAST_KEYWORDS,
    (Namespace.PODCAST, "episodeType"): Tag.PODCAST_EPISODE_TYPE,
    (Namespace.PODCAST, "duration"): Tag.PODCAST_DURATION,
}


def resolve_namespace(
    namespace: Optional[str] = None, prefix: Optional[str] = None
) -> Optional[Namespace]:
    """Map a namespace URI (or, failing that, a prefix) to a :class:`Namespace`.

    Returns None for a namespace outside the supported vocabulary.
    """
    if namespace:
        known = _NAMESPACE_URIS.get(namespace.strip().lower())
        if known is not None:
            return known
    if prefix:
        return _NAMESPACE_PREFIXES.get(prefix.strip().lower())
    if namespace:
        return None
    return Namespace.NONE


def classify(
    local_name: str, namespace: Optional[str] = None, prefix: Optional[str] = None
) -> Tag:
    """Classify an element name into the closed :class:`Tag` vocabulary.

    Unrecognized names map to ``Tag.UNKNOWN``; this never raises.
    """
    family = resolve_namespace(namespace, prefix)
    if family is None:
        return Tag.UNKNOWN
    return _GRAMMAR.get((family, local_name), Tag.UNKNOWN)


def classify_element(element: _Element) -> Tag:
    tag = element.tag
    # Comments, processing instructions and entities carry a non-str tag
    if not isinstance(tag, str):
        return Tag.UNKNOWN
    if tag.startswith("{"):
        namespace, local_name = tag[1:].split("}", 1)
        return classify(local_name, namespace, element.prefix)
    return classify(tag, None, element.prefix)
