"""Merging of all provider feeds into one newest-first video list."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence

import requests

from .config import WidgetConfig, effective_limit, youtube_sources
from .errors import NoContentError, PartialContentError
from .feeds import fetch_channel_uploads, sort_by_newest
from .models import AggregationResult, AggregationStatus, FeedItem, Provider

logger = logging.getLogger(__name__)


def apply_limit(items: Sequence[FeedItem], limit: int) -> List[FeedItem]:
    """Drop the tail beyond ``limit`` items."""
    return list(items[: max(limit, 0)])


def _provider_sources(config: WidgetConfig) -> Dict[Provider, List[str]]:
    return {
        Provider.YOUTUBE: youtube_sources(config),
        Provider.RUMBLE: list(config.rumble_channels),
    }


def aggregate(
    config: WidgetConfig,
    session: requests.Session,
    cancel: Optional[threading.Event] = None,
) -> AggregationResult:
    """Fetch every configured provider and merge their items.

    A provider failure never discards items obtained from another provider.
    UpdateCancelledError propagates so the caller can drop the whole cycle.
    """
    logger.info(
        "Video widget update: channels=%s playlists=%s rumble_channels=%s",
        config.channels,
        config.playlists,
        config.rumble_channels,
    )

    collected: List[FeedItem] = []
    failed_count = 0
    provider_errors: Dict[Provider, str] = {}

    for provider, identifiers in _provider_sources(config).items():
        if not identifiers:
            continue
        try:
            items = fetch_channel_uploads(
                provider,
                identifiers,
                session,
                video_url_template=config.video_url_template,
                include_shorts=config.include_shorts,
                max_workers=config.concurrency,
                timeout=config.timeout,
                cancel=cancel,
            )
        except PartialContentError as exc:
            logger.warning("Partial %s content: %s", provider.value, exc)
            failed_count += exc.failed_count
            provider_errors[provider] = str(exc)
            items = exc.items
        except NoContentError as exc:
            logger.error("Failed to fetch %s videos: %s", provider.value, exc)
            failed_count += exc.failed_count
            provider_errors[provider] = str(exc)
            continue

        logger.info("Successfully fetched %d %s videos", len(items), provider.value)
        collected.extend(items)

    merged = apply_limit(sort_by_newest(collected), effective_limit(config.limit))

    if not provider_errors:
        status = AggregationStatus.OK
    elif merged:
        status = AggregationStatus.PARTIAL
    else:
        status = AggregationStatus.EMPTY_WITH_ERROR

    logger.info("Video widget update complete: %d videos (%s)", len(merged), status.value)
    for index, item in enumerate(merged[:3]):
        logger.debug(
            "Video %d: title=%r author=%r url=%s time=%s",
            index,
            item.title,
            item.author,
            item.url,
            item.time_posted,
        )

    return AggregationResult(
        items=tuple(merged),
        failed_count=failed_count,
        status=status,
        provider_errors=provider_errors,
    )
