import dataclasses

import pytest

from feedtree import Article, Channel, Image, PodcastOwner
from feedtree.models import (
    ArticleBuilder,
    ChannelBuilder,
    ImageBuilder,
    PodcastChannelBuilder,
    split_keywords,
)


def test_setters_strip_and_drop_blank_values():
    builder = ArticleBuilder()
    builder.set("title", "  Hello  ")
    builder.set("author", "   ")
    builder.set("link", None)
    article = builder.build()
    assert article.title == "Hello"
    assert article.author is None
    assert article.link is None


def test_set_overwrites_and_set_if_absent_keeps_first():
    builder = ArticleBuilder()
    builder.set("guid", "first")
    builder.set("guid", "second")
    builder.set_if_absent("pub_date", "Mon, 01 Jan 2024 00:00:00 GMT")
    builder.set_if_absent("pub_date", "Tue, 02 Jan 2024 00:00:00 GMT")
    article = builder.build()
    assert article.guid == "second"
    assert article.pub_date == "Mon, 01 Jan 2024 00:00:00 GMT"


def test_set_if_absent_fills_after_blank_value():
    builder = ArticleBuilder()
    builder.set_if_absent("image", "")
    builder.set_if_absent("image", "https://example.com/a.png")
    assert builder.build().image == "https://example.com/a.png"


def test_unknown_field_is_rejected():
    builder = ArticleBuilder()
    with pytest.raises(AttributeError):
        builder.set("categories", "nope")
    with pytest.raises(AttributeError):
        builder.set("unknown", "x")


def test_categories_keep_order_and_duplicates():
    builder = ArticleBuilder()
    for category in ("b", "a", "b", "", None, " c "):
        builder.add_category(category)
    assert builder.build().categories == ("b", "a", "b", "c")


def test_fresh_builders_are_empty():
    assert ArticleBuilder().build() == Article()
    channel = ChannelBuilder().build()
    assert channel == Channel()
    assert channel.title == ""
    assert channel.image is None
    assert channel.podcast is None
    assert channel.articles == ()


def test_empty_image_is_not_attached():
    builder = ChannelBuilder()
    builder.set("title", "Feed")
    builder.image.set("url", "   ")
    assert builder.build().image is None

    builder.image.set("title", "Logo")
    assert builder.build().image == Image(title="Logo")


def test_image_is_empty():
    assert Image().is_empty()
    assert not Image(description="d").is_empty()
    assert ImageBuilder().build().is_empty()


def test_podcast_data_attached_only_when_present():
    article = ArticleBuilder()
    assert article.build().podcast is None
    article.podcast.add_keywords(["one", "two"])
    assert article.build().podcast.keywords == ("one", "two")

    channel = ChannelBuilder()
    channel.podcast.owner.set("email", "host@example.com")
    podcast = channel.build().podcast
    assert podcast.owner == PodcastOwner(email="host@example.com")
    assert podcast.categories == ()


def test_podcast_owner_suppressed_when_empty():
    builder = PodcastChannelBuilder()
    builder.set("explicit", "no")
    assert builder.build().owner is None


def test_finalized_values_are_immutable():
    article = ArticleBuilder().build()
    with pytest.raises(dataclasses.FrozenInstanceError):
        article.title = "changed"


def test_builder_keeps_mutating_independently_of_snapshots():
    builder = ChannelBuilder()
    builder.add_article(Article(title="one"))
    first = builder.build()
    builder.add_article(Article(title="two"))
    assert len(first.articles) == 1
    assert len(builder.build().articles) == 2


def test_split_keywords():
    assert split_keywords(" a, b ,,c , ") == ["a", "b", "c"]
    assert split_keywords("") == []
    assert split_keywords(None) == []
