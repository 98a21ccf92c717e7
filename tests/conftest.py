from datetime import datetime, timedelta, timezone

import pytest
import requests

from video_feeds.models import FeedItem

YOUTUBE_FEED_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015"
      xmlns:media="http://search.yahoo.com/mrss/"
      xmlns="http://www.w3.org/2005/Atom">
  <title>{channel}</title>
  <author>
    <name>{channel}</name>
    <uri>https://www.youtube.com/channel/{channel_id}</uri>
  </author>
  {entries}
</feed>
"""

YOUTUBE_ENTRY_TEMPLATE = """
  <entry>
    <id>yt:video:{video_id}</id>
    <yt:videoId>{video_id}</yt:videoId>
    <title>{title}</title>
    <link rel="alternate" href="https://www.youtube.com/watch?v={video_id}"/>
    <published>{published}</published>
    <media:group>
      <media:title>{title}</media:title>
      <media:thumbnail url="https://i.ytimg.com/vi/{video_id}/hqdefault.jpg" width="480" height="360"/>
    </media:group>
  </entry>
"""

RUMBLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Rumble Channel</title>
    <link>https://rumble.com/c/example</link>
    <item>
      <title>Media thumbnail clip</title>
      <guid>https://rumble.com/v100-clip.html</guid>
      <pubDate>Tue, 02 Jan 2024 09:55:00 GMT</pubDate>
      <media:thumbnail url="https://sp.rmbl.ws/media.jpg"/>
    </item>
    <item>
      <title></title>
      <guid>https://rumble.com/v101-untitled.html</guid>
      <pubDate>Tue, 02 Jan 2024 09:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Podcast episode</title>
      <guid>https://rumble.com/v102-episode.html</guid>
      <pubDate>Mon, 1 Jan 2024 08:00:00 GMT</pubDate>
      <itunes:image href="https://sp.rmbl.ws/itunes.jpg"/>
    </item>
  </channel>
</rss>
"""


def youtube_feed(channel="Example Channel", channel_id="UCexample", videos=()):
    """Build a YouTube Atom feed; ``videos`` holds (video_id, title, published)."""
    entries = "".join(
        YOUTUBE_ENTRY_TEMPLATE.format(video_id=video_id, title=title, published=published)
        for video_id, title, published in videos
    )
    return YOUTUBE_FEED_TEMPLATE.format(
        channel=channel, channel_id=channel_id, entries=entries
    ).encode("utf-8")


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Stand-in for requests.Session serving canned responses by URL."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        response = self.responses.get(url)
        if response is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, FakeResponse):
            return response
        return FakeResponse(response)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def now():
    return datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


def make_item(title, time_posted, author="Author"):
    return FeedItem(
        thumbnail_url="https://img.example.com/thumb.jpg",
        title=title,
        url=f"https://example.com/{title}",
        author=author,
        author_url="https://example.com/author",
        time_posted=time_posted,
    )


@pytest.fixture
def item_factory(now):
    def factory(title, minutes_ago=0, author="Author"):
        return make_item(title, now - timedelta(minutes=minutes_ago), author=author)

    return factory
