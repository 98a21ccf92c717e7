"""Exception types raised while fetching and aggregating feeds."""

from __future__ import annotations

from typing import List, Sequence

from .models import FeedItem


class VideoFeedsError(Exception):
    """Base class for video_feeds errors."""


class NoContentError(VideoFeedsError):
    """A provider produced no usable items."""

    def __init__(self, message: str = "no content", failed_count: int = 0) -> None:
        super().__init__(message)
        self.failed_count = failed_count


class PartialContentError(VideoFeedsError):
    """Some identifiers failed but the remaining items are still usable."""

    def __init__(self, items: Sequence[FeedItem], failed_count: int) -> None:
        super().__init__(f"missing videos from {failed_count} channels")
        self.items: List[FeedItem] = list(items)
        self.failed_count = failed_count


class WorkerPoolError(VideoFeedsError):
    """The concurrent fetch pool could not be started."""


class FeedDecodeError(VideoFeedsError):
    """A response body could not be decoded as a feed document."""


class UpdateCancelledError(VideoFeedsError):
    """The update cycle was cancelled before the fetches returned."""


class UpdateInProgressError(VideoFeedsError):
    """An update cycle is already running for this widget."""
