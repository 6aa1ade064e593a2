import datetime

import pytest

from feedtree import Article, Channel
from feedtree.dates import parse_datetime

UTC = datetime.timezone.utc


@pytest.mark.parametrize(
    "value,expected",
    [
        (
            "Tue, 24 Dec 2019 20:00:00 +0000",
            datetime.datetime(2019, 12, 24, 20, 0, tzinfo=UTC),
        ),
        (
            "Mon, 01 Jan 2024 10:00:00 +0200",
            datetime.datetime(2024, 1, 1, 8, 0, tzinfo=UTC),
        ),
        (
            "Sat, 04 Jan 2020 01:06:48 GMT",
            datetime.datetime(2020, 1, 4, 1, 6, 48, tzinfo=UTC),
        ),
        (
            "Wed, 03 Jan 2024 09:15:00 PST",
            datetime.datetime(2024, 1, 3, 17, 15, tzinfo=UTC),
        ),
        (
            "2021-11-11T00:00:00+00:00",
            datetime.datetime(2021, 11, 11, 0, 0, tzinfo=UTC),
        ),
        (
            "2023-04-28T20:00:30Z",
            datetime.datetime(2023, 4, 28, 20, 0, 30, tzinfo=UTC),
        ),
        (
            "2024-03-05 12:30:00 +0100",
            datetime.datetime(2024, 3, 5, 11, 30, tzinfo=UTC),
        ),
        (
            "2024-03-05T12:30:00",
            datetime.datetime(2024, 3, 5, 12, 30, tzinfo=UTC),
        ),
        (
            "December 24, 2019 8:00 PM EST",
            datetime.datetime(2019, 12, 25, 1, 0, tzinfo=UTC),
        ),
    ],
)
def test_parse_datetime(value, expected):
    assert parse_datetime(value) == expected


@pytest.mark.parametrize(
    "value", [None, "", "   ", "not a date at all", "2023-02-29T08:00:00Z"]
)
def test_parse_datetime_failures(value):
    assert parse_datetime(value) is None


def test_model_datetime_properties():
    article = Article(pub_date="Tue, 24 Dec 2019 20:00:00 +0000")
    assert article.pub_datetime == datetime.datetime(2019, 12, 24, 20, tzinfo=UTC)
    assert Article().pub_datetime is None

    channel = Channel(last_build_date="2023-04-28T20:00:30+00:00")
    assert channel.last_build_datetime == datetime.datetime(
        2023, 4, 28, 20, 0, 30, tzinfo=UTC
    )
    assert Channel().last_build_datetime is None
