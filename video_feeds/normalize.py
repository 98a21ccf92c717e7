"""Per-provider mapping of decoded feed entries into FeedItems."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import parse_qs, urlsplit

from .models import (
    FeedItem,
    Provider,
    RumbleFeedDocument,
    RumbleFeedEntry,
    YoutubeFeedDocument,
    YoutubeFeedEntry,
)
from .timeparse import parse_feed_time

logger = logging.getLogger(__name__)

VIDEO_ID_PLACEHOLDER = "{VIDEO-ID}"
PLACEHOLDER_URL = "#"
PLACEHOLDER_THUMBNAIL = (
    "data:image/svg+xml,%3Csvg xmlns='http://www.w3.org/2000/svg' width='16' "
    "height='9'%3E%3Crect width='16' height='9' fill='%23ccc'/%3E%3C/svg%3E"
)


def rewrite_video_url(link: str, template: str, param: str = "v") -> str:
    """Substitute the video id found in ``link`` into ``template``."""
    if not template:
        return link
    try:
        query = urlsplit(link).query
    except ValueError as exc:
        logger.debug("Cannot parse video link %r: %s", link, exc)
        return PLACEHOLDER_URL
    video_id = parse_qs(query).get(param, [""])[0]
    return template.replace(VIDEO_ID_PLACEHOLDER, video_id)


def _first_non_empty(*candidates: Optional[str]) -> str:
    for candidate in candidates:
        if candidate:
            return candidate
    return PLACEHOLDER_THUMBNAIL


def normalize_youtube_entry(
    entry: YoutubeFeedEntry, document: YoutubeFeedDocument, video_url_template: str
) -> FeedItem:
    return FeedItem(
        thumbnail_url=_first_non_empty(entry.thumbnail_url),
        title=entry.title,
        url=rewrite_video_url(entry.link, video_url_template),
        author=document.channel,
        author_url=document.channel_link + "/videos",
        time_posted=parse_feed_time(entry.published, Provider.YOUTUBE),
    )


def normalize_rumble_entry(
    entry: RumbleFeedEntry, document: RumbleFeedDocument, video_url_template: str
) -> Optional[FeedItem]:
    """Return the FeedItem for ``entry`` or None for title/link-less noise.

    Rumble links carry no query-string id, so the URL template is not applied.
    """
    if not entry.title or not entry.link:
        return None
    return FeedItem(
        thumbnail_url=_first_non_empty(entry.media_thumbnail_url, entry.thumbnail_url),
        title=entry.title,
        url=entry.link,
        author=document.channel,
        author_url=document.channel_link,
        time_posted=parse_feed_time(entry.published, Provider.RUMBLE),
    )


def normalize_youtube_document(
    document: YoutubeFeedDocument, video_url_template: str = ""
) -> List[FeedItem]:
    return [
        normalize_youtube_entry(entry, document, video_url_template)
        for entry in document.entries
    ]


def normalize_rumble_document(
    document: RumbleFeedDocument, video_url_template: str = ""
) -> List[FeedItem]:
    items: List[FeedItem] = []
    for entry in document.entries:
        item = normalize_rumble_entry(entry, document, video_url_template)
        if item is None:
            logger.debug("Skipping Rumble entry without title or link in %s", document.channel)
            continue
        items.append(item)
    return items
