"""Single-pass RSS and Atom extractors.

Both extractors walk the same ``(event, element)`` stream produced by lxml's
pull parser and keep an explicit state stack that mirrors element depth:
container elements listed in ``transitions`` push a new :class:`State`,
every other element inherits its parent's state. Leaf handlers read the
state to decide which builder a value belongs to.

The stream is replayed only after lxml has tokenized the whole document, so
on a ``start`` event an element's text and children are already complete.
Leaf handlers rely on that to read text and detect embedded markup
without waiting for the matching ``end`` event.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from lxml import etree

from .images import first_image_url
from .models import ArticleBuilder, Channel, ChannelBuilder, split_keywords
from .tags import Tag, classify_element

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)


class State(enum.Enum):
    OUTSIDE = "outside"
    CHANNEL = "channel"
    IMAGE = "image"
    OWNER = "owner"
    ITEM = "item"
    # Inside markup that was embedded in a text field; nothing is extracted
    MARKUP = "markup"
    # Inside a container describing some other document (Atom entry
    # <source>, RSS <textInput>); its children must not reach our builders
    FOREIGN = "foreign"


_CHANNEL_SCOPE = frozenset((State.CHANNEL, State.IMAGE, State.OWNER))
_INERT = frozenset((State.OUTSIDE, State.MARKUP, State.FOREIGN))

_PODCAST_CHANNEL_FIELDS: dict[Tag, str] = {
    Tag.PODCAST_EXPLICIT: "explicit",
    Tag.PODCAST_TYPE: "type",
    Tag.PODCAST_SUBTITLE: "subtitle",
    Tag.PODCAST_AUTHOR: "author",
    Tag.PODCAST_SUMMARY: "summary",
    Tag.PODCAST_NEW_FEED_URL: "new_feed_url",
}

_PODCAST_ARTICLE_FIELDS: dict[Tag, str] = {
    Tag.PODCAST_EXPLICIT: "explicit",
    Tag.PODCAST_SUBTITLE: "subtitle",
    Tag.PODCAST_AUTHOR: "author",
    Tag.PODCAST_SUMMARY: "summary",
    Tag.PODCAST_EPISODE_TYPE: "episode_type",
    Tag.PODCAST_DURATION: "duration",
}

_PODCAST_OWNER_FIELDS: dict[Tag, str] = {
    Tag.PODCAST_OWNER_NAME: "name",
    Tag.PODCAST_OWNER_EMAIL: "email",
}

_Handler = Callable[[Tag, "_Element"], None]


def _media_kind(mime_type: Optional[str], medium: Optional[str] = None) -> str:
    kind = (medium or mime_type or "").lower()
    if "audio" in kind:
        return "audio"
    if "video" in kind:
        return "video"
    return "image"


def _inner_markup(element: _Element) -> str:
    parts = [element.text or ""]
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


class FeedExtractor:
    """Shared driver: state stack, item finalization, cross-format tags."""

    name = "feed"
    transitions: dict[tuple[State, Tag], State] = {}

    def __init__(
        self,
        *,
        include_content: bool = True,
        include_categories: bool = True,
        include_podcast: bool = True,
    ) -> None:
        self.include_content = include_content
        self.channel = ChannelBuilder()
        self.article = ArticleBuilder()
        # Fallback image URLs scanned from the current item's HTML fields
        self._content_image: Optional[str] = None
        self._description_image: Optional[str] = None
        self._stack: list[State] = [State.OUTSIDE]

        handlers: dict[Tag, _Handler] = {
            Tag.MEDIA_CONTENT: self._media,
            Tag.MEDIA_THUMBNAIL: self._media,
        }
        if include_categories:
            handlers[Tag.CATEGORY] = self._category
            handlers[Tag.ATOM_CATEGORY] = self._category
        if include_podcast:
            for tag in set(_PODCAST_CHANNEL_FIELDS) | set(_PODCAST_ARTICLE_FIELDS):
                handlers[tag] = self._podcast_text
            for tag in _PODCAST_OWNER_FIELDS:
                handlers[tag] = self._podcast_owner
            handlers[Tag.PODCAST_IMAGE] = self._podcast_image
            handlers[Tag.PODCAST_CATEGORY] = self._podcast_category
            handlers[Tag.PODCAST_KEYWORDS] = self._podcast_keywords
        handlers.update(self.grammar_handlers())
        self._handlers = handlers

    def grammar_handlers(self) -> dict[Tag, _Handler]:
        return {}

    @property
    def state(self) -> State:
        return self._stack[-1]

    def in_item(self) -> bool:
        return self._stack[-1] is State.ITEM

    def in_channel(self) -> bool:
        return self._stack[-1] in _CHANNEL_SCOPE

    def extract(self, events: Iterable[tuple[str, _Element]]) -> Channel:
        for event, element in events:
            if event == "start":
                self._start(element)
            elif event == "end":
                self._end()

        channel = self.channel.build()
        logger.debug(
            "Extracted %s channel %r with %d articles",
            self.name,
            channel.title,
            len(channel.articles),
        )
        return channel

    def _start(self, element: _Element) -> None:
        tag = classify_element(element)
        parent_state = self._stack[-1]
        self._stack.append(self.transitions.get((parent_state, tag), parent_state))
        if parent_state in _INERT:
            return
        handler = self._handlers.get(tag)
        if handler is not None:
            handler(tag, element)

    def _end(self) -> None:
        state = self._stack.pop()
        if state is State.ITEM and self._stack[-1] is not State.ITEM:
            self._finish_article()

    def _finish_article(self) -> None:
        self.article.set_if_absent(
            "image", self._content_image or self._description_image
        )
        self.channel.add_article(self.article.build())
        self.article = ArticleBuilder()
        self._content_image = None
        self._description_image = None

    def text(self, element: _Element) -> Optional[str]:
        """Text of a leaf element.

        An element that holds child elements carries unescaped markup where
        text was expected: the field is dropped and the markup skipped.
        """
        if len(element):
            self._stack[-1] = State.MARKUP
            logger.debug("Ignoring embedded markup inside <%s>", element.tag)
            return None
        return element.text

    def set_description(self, value: Optional[str]) -> None:
        self.article.set("description", value)
        self._description_image = first_image_url(value)

    def set_content(self, value: Optional[str]) -> None:
        if self.include_content:
            self.article.set("content", value)
        self._content_image = first_image_url(value)

    def add_enclosure(self, url: Optional[str], mime_type: Optional[str]) -> None:
        self.article.set_if_absent(_media_kind(mime_type), url)

    # Handlers shared by both grammars

    def _media(self, tag: Tag, element: _Element) -> None:
        if not self.in_item():
            return
        url = element.get("url")
        if not url or not url.strip():
            return
        kind = "image"
        if tag is Tag.MEDIA_CONTENT:
            kind = _media_kind(element.get("type"), element.get("medium"))
        if kind == "image":
            self.article.set("image", url)
        else:
            self.article.set_if_absent(kind, url)

    def _category(self, tag: Tag, element: _Element) -> None:
        if not self.in_item():
            return
        category = self.text(element)
        if not category or not category.strip():
            category = element.get("term")
        self.article.add_category(category)

    def _podcast_text(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            field = _PODCAST_ARTICLE_FIELDS.get(tag)
            if field is not None:
                self.article.podcast.set(field, self.text(element))
        elif self.in_channel():
            field = _PODCAST_CHANNEL_FIELDS.get(tag)
            if field is not None:
                self.channel.podcast.set(field, self.text(element))

    def _podcast_owner(self, tag: Tag, element: _Element) -> None:
        if self.state is State.OWNER:
            self.channel.podcast.owner.set(
                _PODCAST_OWNER_FIELDS[tag], self.text(element)
            )

    def _podcast_image(self, tag: Tag, element: _Element) -> None:
        href = element.get("href") or self.text(element)
        if self.in_item():
            self.article.podcast.set("image", href)
        elif self.in_channel():
            self.channel.podcast.set("image", href)

    def _podcast_category(self, tag: Tag, element: _Element) -> None:
        if self.in_channel():
            self.channel.podcast.add_category(element.get("text"))

    def _podcast_keywords(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.podcast.add_keywords(split_keywords(self.text(element)))
        elif self.in_channel():
            self.channel.podcast.add_keywords(split_keywords(self.text(element)))


class RssExtractor(FeedExtractor):
    name = "rss"
    transitions = {
        (State.OUTSIDE, Tag.CHANNEL): State.CHANNEL,
        (State.CHANNEL, Tag.ITEM): State.ITEM,
        (State.CHANNEL, Tag.IMAGE): State.IMAGE,
        (State.CHANNEL, Tag.PODCAST_OWNER): State.OWNER,
        (State.CHANNEL, Tag.TEXT_INPUT): State.FOREIGN,
    }

    def grammar_handlers(self) -> dict[Tag, _Handler]:
        return {
            Tag.TITLE: self._shared_text,
            Tag.LINK: self._shared_text,
            Tag.DESCRIPTION: self._shared_text,
            Tag.URL: self._image_url,
            Tag.LAST_BUILD_DATE: self._channel_text,
            Tag.UPDATE_PERIOD: self._channel_text,
            Tag.AUTHOR: self._item_text,
            Tag.PUB_DATE: self._item_text,
            Tag.GUID: self._item_text,
            Tag.CONTENT: self._content,
            Tag.SOURCE: self._source,
            Tag.ENCLOSURE: self._enclosure,
        }

    _FIELDS: dict[Tag, str] = {
        Tag.TITLE: "title",
        Tag.LINK: "link",
        Tag.DESCRIPTION: "description",
        Tag.LAST_BUILD_DATE: "last_build_date",
        Tag.UPDATE_PERIOD: "update_period",
        Tag.AUTHOR: "author",
        Tag.PUB_DATE: "pub_date",
        Tag.GUID: "guid",
    }

    def _shared_text(self, tag: Tag, element: _Element) -> None:
        """title, link and description exist on the image, item and channel."""
        state = self.state
        value = self.text(element)
        if state is State.IMAGE:
            self.channel.image.set(self._FIELDS[tag], value)
        elif state is State.ITEM:
            if tag is Tag.DESCRIPTION:
                self.set_description(value)
            else:
                self.article.set(self._FIELDS[tag], value)
        elif state is State.CHANNEL:
            self.channel.set(self._FIELDS[tag], value)

    def _image_url(self, tag: Tag, element: _Element) -> None:
        if self.state is State.IMAGE:
            self.channel.image.set("url", self.text(element))

    def _channel_text(self, tag: Tag, element: _Element) -> None:
        if self.state is State.CHANNEL:
            self.channel.set(self._FIELDS[tag], self.text(element))

    def _item_text(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.set(self._FIELDS[tag], self.text(element))

    def _content(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.set_content(self.text(element))

    def _source(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.set("source_name", self.text(element))
            self.article.set("source_url", element.get("url"))

    def _enclosure(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.add_enclosure(element.get("url"), element.get("type"))


class AtomExtractor(FeedExtractor):
    name = "atom"
    transitions = {
        (State.OUTSIDE, Tag.FEED): State.CHANNEL,
        (State.CHANNEL, Tag.ENTRY): State.ITEM,
        (State.CHANNEL, Tag.PODCAST_OWNER): State.OWNER,
        (State.ITEM, Tag.ATOM_SOURCE): State.FOREIGN,
    }

    def grammar_handlers(self) -> dict[Tag, _Handler]:
        return {
            Tag.ATOM_TITLE: self._title,
            Tag.ATOM_LINK: self._link,
            Tag.ATOM_SUBTITLE: self._subtitle,
            Tag.ATOM_ICON: self._icon,
            Tag.ATOM_LOGO: self._icon,
            Tag.ATOM_UPDATED: self._updated,
            Tag.ATOM_PUBLISHED: self._published,
            Tag.ATOM_SUMMARY: self._summary,
            Tag.ATOM_CONTENT: self._content,
            Tag.ATOM_ID: self._id,
            Tag.ATOM_AUTHOR: self._author,
        }

    def text(self, element: _Element) -> Optional[str]:
        # type="xhtml" constructs are inline markup by definition
        if element.get("type") == "xhtml" and len(element):
            self._stack[-1] = State.MARKUP
            return _inner_markup(element)
        return super().text(element)

    def _title(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.set("title", self.text(element))
        elif self.state is State.CHANNEL:
            self.channel.set("title", self.text(element))

    def _link(self, tag: Tag, element: _Element) -> None:
        rel = element.get("rel")
        if rel == "edit":
            return
        href = element.get("href")
        if self.in_item():
            self.article.set("link", href)
            if rel == "enclosure":
                self.add_enclosure(href, element.get("type"))
        elif self.state is State.CHANNEL:
            self.channel.set("link", href)

    def _subtitle(self, tag: Tag, element: _Element) -> None:
        if self.state is State.CHANNEL:
            self.channel.set("description", self.text(element))

    def _icon(self, tag: Tag, element: _Element) -> None:
        if self.state is not State.CHANNEL:
            return
        if tag is Tag.ATOM_ICON:
            self.channel.image.set("url", self.text(element))
        else:
            self.channel.image.set_if_absent("url", self.text(element))

    def _updated(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.set_if_absent("pub_date", self.text(element))
        elif self.state is State.CHANNEL:
            self.channel.set("last_build_date", self.text(element))

    def _published(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.set_if_absent("pub_date", self.text(element))

    def _summary(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.set_description(self.text(element))

    def _content(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.set_content(self.text(element))

    def _id(self, tag: Tag, element: _Element) -> None:
        if self.in_item():
            self.article.set("guid", self.text(element))

    def _author(self, tag: Tag, element: _Element) -> None:
        if not self.in_item():
            return
        name = element.find(f"{{{etree.QName(element).namespace}}}name")
        if name is not None:
            self.article.set("author", name.text)
        elif not len(element):
            self.article.set("author", element.text)
