"""Immutable feed document tree and the builders that accumulate it.

Builders are mutable and owned by a single extraction pass; ``build()``
snapshots them into frozen dataclasses. Optional string fields are always
either a stripped, non-empty string or None.
"""

from __future__ import annotations

import dataclasses
import datetime
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Optional

from .dates import parse_datetime


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Image:
    title: Optional[str] = None
    link: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.url or self.title or self.link or self.description)


@dataclass(frozen=True)
class PodcastOwner:
    name: Optional[str] = None
    email: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.name or self.email)


@dataclass(frozen=True)
class PodcastChannelData:
    explicit: Optional[str] = None
    type: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    summary: Optional[str] = None
    image: Optional[str] = None
    owner: Optional[PodcastOwner] = None
    categories: tuple[str, ...] = ()
    new_feed_url: Optional[str] = None
    keywords: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return self == PodcastChannelData()


@dataclass(frozen=True)
class PodcastArticleData:
    episode_type: Optional[str] = None
    author: Optional[str] = None
    image: Optional[str] = None
    subtitle: Optional[str] = None
    summary: Optional[str] = None
    duration: Optional[str] = None
    explicit: Optional[str] = None
    keywords: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return self == PodcastArticleData()


@dataclass(frozen=True)
class Article:
    title: Optional[str] = None
    author: Optional[str] = None
    link: Optional[str] = None
    pub_date: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    guid: Optional[str] = None
    audio: Optional[str] = None
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    video: Optional[str] = None
    categories: tuple[str, ...] = ()
    podcast: Optional[PodcastArticleData] = None

    @property
    def pub_datetime(self) -> Optional[datetime.datetime]:
        """``pub_date`` parsed to a UTC datetime, None if absent or unparseable."""
        return parse_datetime(self.pub_date)


@dataclass(frozen=True)
class Channel:
    title: str = ""
    link: Optional[str] = None
    description: Optional[str] = None
    last_build_date: Optional[str] = None
    update_period: Optional[str] = None
    image: Optional[Image] = None
    podcast: Optional[PodcastChannelData] = None
    articles: tuple[Article, ...] = ()

    @property
    def last_build_datetime(self) -> Optional[datetime.datetime]:
        return parse_datetime(self.last_build_date)


class _Builder:
    """Accumulates string fields and ordered sequences for one product type."""

    product: ClassVar[type]
    sequences: ClassVar[tuple[str, ...]] = ()
    nested: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        scalar_names = {f.name for f in dataclasses.fields(self.product)}
        scalar_names.difference_update(self.sequences, self.nested)
        self._scalar_names = frozenset(scalar_names)
        self._values: dict[str, Optional[str]] = {}
        self._sequences: dict[str, list[str]] = {name: [] for name in self.sequences}

    def _check(self, name: str) -> None:
        if name not in self._scalar_names:
            raise AttributeError(
                f"{type(self).__name__} has no string field '{name}'"
            )

    def set(self, name: str, value: Optional[str]) -> None:
        """Overwrite a string field; blank values clear it."""
        self._check(name)
        self._values[name] = _clean(value)

    def set_if_absent(self, name: str, value: Optional[str]) -> None:
        """First-wins variant of :meth:`set`."""
        self._check(name)
        if self._values.get(name) is None:
            self._values[name] = _clean(value)

    def _append(self, name: str, value: Optional[str]) -> None:
        value = _clean(value)
        if value is not None:
            self._sequences[name].append(value)

    def _build_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = dict(self._values)
        for name, values in self._sequences.items():
            kwargs[name] = tuple(values)
        return kwargs

    def build(self) -> Any:
        return self.product(**self._build_kwargs())


class ImageBuilder(_Builder):
    product = Image


class PodcastOwnerBuilder(_Builder):
    product = PodcastOwner


class PodcastChannelBuilder(_Builder):
    product = PodcastChannelData
    sequences = ("categories", "keywords")
    nested = ("owner",)

    def __init__(self) -> None:
        super().__init__()
        self.owner = PodcastOwnerBuilder()

    def add_category(self, category: Optional[str]) -> None:
        self._append("categories", category)

    def add_keyword(self, keyword: Optional[str]) -> None:
        self._append("keywords", keyword)

    def add_keywords(self, keywords: Iterable[str]) -> None:
        for keyword in keywords:
            self.add_keyword(keyword)

    def build(self) -> PodcastChannelData:
        kwargs = self._build_kwargs()
        owner = self.owner.build()
        kwargs["owner"] = None if owner.is_empty() else owner
        return PodcastChannelData(**kwargs)


class PodcastArticleBuilder(_Builder):
    product = PodcastArticleData
    sequences = ("keywords",)

    def add_keyword(self, keyword: Optional[str]) -> None:
        self._append("keywords", keyword)

    def add_keywords(self, keywords: Iterable[str]) -> None:
        for keyword in keywords:
            self.add_keyword(keyword)


class ArticleBuilder(_Builder):
    product = Article
    sequences = ("categories",)
    nested = ("podcast",)

    def __init__(self) -> None:
        super().__init__()
        self.podcast = PodcastArticleBuilder()

    def add_category(self, category: Optional[str]) -> None:
        self._append("categories", category)

    def build(self) -> Article:
        kwargs = self._build_kwargs()
        podcast = self.podcast.build()
        kwargs["podcast"] = None if podcast.is_empty() else podcast
        return Article(**kwargs)


class ChannelBuilder(_Builder):
    product = Channel
    nested = ("image", "podcast", "articles")

    def __init__(self) -> None:
        super().__init__()
        self.image = ImageBuilder()
        self.podcast = PodcastChannelBuilder()
        self._articles: list[Article] = []

    def add_article(self, article: Article) -> None:
        self._articles.append(article)

    def build(self) -> Channel:
        kwargs = self._build_kwargs()
        # Channel.title is the one non-optional string field
        kwargs["title"] = kwargs.get("title") or ""
        image = self.image.build()
        kwargs["image"] = None if image.is_empty() else image
        podcast = self.podcast.build()
        kwargs["podcast"] = None if podcast.is_empty() else podcast
        kwargs["articles"] = tuple(self._articles)
        return Channel(**kwargs)


def split_keywords(text: Optional[str]) -> list[str]:
    """Split a comma separated keyword list, dropping blank pieces."""
    if not text:
        return []
    return [keyword.strip() for keyword in text.split(",") if keyword.strip()]
