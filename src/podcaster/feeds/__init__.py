"""Feed retrieval and RSS parsing for podcaster."""

from podcaster.feeds.models import Episode, media_file_name
from podcaster.feeds.parser import RSSParser, parse_feed

__all__ = ["Episode", "RSSParser", "media_file_name", "parse_feed"]
