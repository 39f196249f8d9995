"""HTTP source providers: Reddit, Steam news, Discourse forums and static pages."""

from nextwipe.providers.source.forum_provider import DiscourseForumProvider
from nextwipe.providers.source.http_page_provider import HttpPageProvider
from nextwipe.providers.source.reddit_provider import RedditProvider
from nextwipe.providers.source.steam_news_provider import SteamNewsProvider

__all__ = [
    "DiscourseForumProvider",
    "HttpPageProvider",
    "RedditProvider",
    "SteamNewsProvider",
]
