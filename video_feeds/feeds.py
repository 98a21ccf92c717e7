"""Feed fetching and decoding for each video provider."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import feedparser
import requests

from .errors import (
    FeedDecodeError,
    NoContentError,
    PartialContentError,
    WorkerPoolError,
)
from .models import (
    PLAYLIST_PREFIX,
    FeedItem,
    Provider,
    RumbleFeedDocument,
    RumbleFeedEntry,
    YoutubeFeedDocument,
    YoutubeFeedEntry,
)
from .normalize import normalize_rumble_document, normalize_youtube_document
from .workers import DEFAULT_WORKERS, run_concurrently

logger = logging.getLogger(__name__)

YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml"
RUMBLE_FEED_URL = "http://rumble-rss.xyz/rumble/"
USER_AGENT = "video-feeds/0.1"
DEFAULT_TIMEOUT = 10.0

FeedDocument = Union[YoutubeFeedDocument, RumbleFeedDocument]


def create_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Return an HTTP session shared by the fetchers of one widget."""
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    return session


def build_feed_url(provider: Provider, identifier: str, include_shorts: bool = False) -> str:
    """Return the feed URL for a channel, playlist or named feed."""
    if provider is Provider.RUMBLE:
        return RUMBLE_FEED_URL + identifier

    if identifier.startswith(PLAYLIST_PREFIX):
        return f"{YOUTUBE_FEED_URL}?playlist_id={identifier[len(PLAYLIST_PREFIX):]}"
    if not include_shorts and identifier.startswith("UC"):
        # UULF is the uploads playlist of a channel without shorts.
        playlist_id = identifier.replace("UC", "UULF", 1)
        return f"{YOUTUBE_FEED_URL}?playlist_id={playlist_id}"
    return f"{YOUTUBE_FEED_URL}?channel_id={identifier}"


def _thumbnail(entry: Any, key: str) -> str:
    thumbnails = entry.get(key) or []
    if isinstance(thumbnails, list) and thumbnails:
        return thumbnails[0].get("url", "") or ""
    return ""


def decode_youtube_feed(parsed: Any) -> YoutubeFeedDocument:
    """Build a YoutubeFeedDocument from a feedparser result."""
    feed = parsed.feed
    author_detail = feed.get("author_detail") or {}
    document = YoutubeFeedDocument(
        channel=feed.get("author", "") or "",
        channel_link=author_detail.get("href", "") or "",
    )
    for entry in parsed.entries:
        document.entries.append(
            YoutubeFeedEntry(
                title=entry.get("title", "") or "",
                published=entry.get("published", "") or "",
                link=entry.get("link", "") or "",
                thumbnail_url=_thumbnail(entry, "media_thumbnail"),
            )
        )
    return document


def decode_rumble_feed(parsed: Any) -> RumbleFeedDocument:
    """Build a RumbleFeedDocument from a feedparser result."""
    feed = parsed.feed
    document = RumbleFeedDocument(
        channel=feed.get("title", "") or "",
        channel_link=feed.get("link", "") or "",
    )
    for entry in parsed.entries:
        image = entry.get("image") or {}
        document.entries.append(
            RumbleFeedEntry(
                title=entry.get("title", "") or "",
                published=entry.get("published", "") or "",
                link=entry.get("id", "") or "",
                thumbnail_url=image.get("href", "") or "",
                media_thumbnail_url=_thumbnail(entry, "media_thumbnail"),
            )
        )
    return document


@dataclass(frozen=True)
class ProviderSpec:
    """Decode and normalize functions for one provider."""

    label: str
    decode: Callable[[Any], FeedDocument]
    normalize: Callable[[Any, str], List[FeedItem]]


PROVIDERS: Dict[Provider, ProviderSpec] = {
    Provider.YOUTUBE: ProviderSpec(
        label="YouTube",
        decode=decode_youtube_feed,
        normalize=normalize_youtube_document,
    ),
    Provider.RUMBLE: ProviderSpec(
        label="Rumble",
        decode=decode_rumble_feed,
        normalize=normalize_rumble_document,
    ),
}


def decode_feed_task(
    session: requests.Session,
    decode: Callable[[Any], FeedDocument],
    timeout: float = DEFAULT_TIMEOUT,
) -> Callable[[str], FeedDocument]:
    """Return a worker task that downloads and decodes one feed URL."""

    def task(feed_url: str) -> FeedDocument:
        logger.debug("Fetching feed %s", feed_url)
        response = session.get(feed_url, timeout=timeout)
        response.raise_for_status()
        parsed = feedparser.parse(response.content)
        # An empty version means feedparser recognised no RSS/Atom format,
        # e.g. an HTML error or consent page served with status 200.
        if not parsed.get("version"):
            raise FeedDecodeError(
                f"{feed_url} is not a feed document: "
                f"{parsed.get('bozo_exception') or 'unrecognised format'}"
            )
        return decode(parsed)

    return task


def sort_by_newest(items: Sequence[FeedItem]) -> List[FeedItem]:
    return sorted(items, key=lambda item: item.time_posted, reverse=True)


def fetch_channel_uploads(
    provider: Provider,
    identifiers: Sequence[str],
    session: requests.Session,
    video_url_template: str = "",
    include_shorts: bool = False,
    max_workers: int = DEFAULT_WORKERS,
    timeout: float = DEFAULT_TIMEOUT,
    cancel: Optional[threading.Event] = None,
) -> List[FeedItem]:
    """Fetch every identifier of one provider and return its items newest first.

    Raises NoContentError when no item was collected and PartialContentError,
    carrying the collected items, when some identifiers failed.
    """
    spec = PROVIDERS[provider]
    feed_urls = [build_feed_url(provider, identifier, include_shorts) for identifier in identifiers]

    try:
        documents, errors = run_concurrently(
            decode_feed_task(session, spec.decode, timeout),
            feed_urls,
            max_workers=max_workers,
            cancel=cancel,
        )
    except WorkerPoolError as exc:
        raise NoContentError(f"no content: {exc}", failed_count=len(identifiers)) from exc

    items: List[FeedItem] = []
    failed = 0
    for identifier, document, error in zip(identifiers, documents, errors):
        if error is not None:
            failed += 1
            logger.error("Failed to fetch %s feed for '%s': %s", spec.label, identifier, error)
            continue
        items.extend(spec.normalize(document, video_url_template))

    if not items:
        raise NoContentError(f"no {spec.label} videos collected", failed_count=failed)

    items = sort_by_newest(items)
    logger.info(
        "Collected %d %s videos from %d feeds", len(items), spec.label, len(identifiers) - failed
    )

    if failed:
        raise PartialContentError(items, failed)
    return items


def fetch_youtube_channel_uploads(
    identifiers: Sequence[str],
    session: requests.Session,
    video_url_template: str = "",
    include_shorts: bool = False,
    **kwargs: Any,
) -> List[FeedItem]:
    return fetch_channel_uploads(
        Provider.YOUTUBE,
        identifiers,
        session,
        video_url_template=video_url_template,
        include_shorts=include_shorts,
        **kwargs,
    )


def fetch_rumble_channel_uploads(
    identifiers: Sequence[str],
    session: requests.Session,
    video_url_template: str = "",
    **kwargs: Any,
) -> List[FeedItem]:
    return fetch_channel_uploads(
        Provider.RUMBLE, identifiers, session, video_url_template=video_url_template, **kwargs
    )
