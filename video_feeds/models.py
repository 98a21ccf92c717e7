"""Shared data models for video_feeds."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

PLAYLIST_PREFIX = "playlist:"


class Provider(enum.Enum):
    """Upstream video providers with their own feed encodings."""

    YOUTUBE = "youtube"
    RUMBLE = "rumble"


@dataclass(frozen=True, eq=False)
class FeedItem:
    """Canonical video entry shared by every provider."""

    thumbnail_url: str
    title: str
    url: str
    author: str
    author_url: str
    time_posted: datetime


@dataclass
class YoutubeFeedEntry:
    title: str
    published: str
    link: str
    thumbnail_url: str = ""


@dataclass
class YoutubeFeedDocument:
    """Decoded YouTube Atom feed (channel uploads or playlist)."""

    channel: str
    channel_link: str
    entries: List[YoutubeFeedEntry] = field(default_factory=list)


@dataclass
class RumbleFeedEntry:
    title: str
    published: str
    link: str
    thumbnail_url: str = ""
    media_thumbnail_url: str = ""


@dataclass
class RumbleFeedDocument:
    """Decoded Rumble RSS 2.0 feed."""

    channel: str
    channel_link: str
    entries: List[RumbleFeedEntry] = field(default_factory=list)


class AggregationStatus(enum.Enum):
    OK = "ok"
    PARTIAL = "partial"
    EMPTY_WITH_ERROR = "empty-with-error"


@dataclass(frozen=True)
class AggregationResult:
    """Merged items of one update cycle, newest first."""

    items: Tuple[FeedItem, ...] = ()
    failed_count: int = 0
    status: AggregationStatus = AggregationStatus.OK
    provider_errors: Dict[Provider, str] = field(default_factory=dict)


@dataclass(frozen=True)
class WidgetState:
    """Published state of a videos widget between update cycles."""

    is_first_load: bool
    content_available: bool
    refresh_interval: timedelta
    items: Tuple[FeedItem, ...] = ()
    last_result: Optional[AggregationResult] = None
