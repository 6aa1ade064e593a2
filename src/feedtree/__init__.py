from .images import first_image_url
from .main import DocumentFormatError, FeedParseError, FeedSyntaxError, parse
from .models import (
    Article,
    Channel,
    Image,
    PodcastArticleData,
    PodcastChannelData,
    PodcastOwner,
)
from .tags import Tag, classify

__all__ = [
    "Article",
    "Channel",
    "DocumentFormatError",
    "FeedParseError",
    "FeedSyntaxError",
    "Image",
    "PodcastArticleData",
    "PodcastChannelData",
    "PodcastOwner",
    "Tag",
    "classify",
    "first_image_url",
    "parse",
]
