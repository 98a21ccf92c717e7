"""Timestamp parsing for provider feeds."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Tuple

from .models import Provider

logger = logging.getLogger(__name__)

INVALID_DATE = "Invalid Date"

# Tried in order, first match wins.
TIME_LAYOUTS: Dict[Provider, Tuple[str, ...]] = {
    Provider.YOUTUBE: ("%Y-%m-%dT%H:%M:%S%z",),
    Provider.RUMBLE: (
        "%a, %d %b %Y %H:%M:%S GMT",
        "%a, %d %b %Y %H:%M:%S %z",
    ),
}


def parse_feed_time(raw: str, provider: Provider) -> datetime:
    """Parse a feed timestamp, falling back to the current time.

    A bad timestamp never fails the surrounding item: empty values, the
    ``"Invalid Date"`` sentinel and unknown layouts all resolve to now. The
    fallback is logged with ``provider`` and ``raw_time`` extras.
    """
    value = (raw or "").strip()
    if value and value != INVALID_DATE:
        for layout in TIME_LAYOUTS[provider]:
            try:
                parsed = datetime.strptime(value, layout)
            except ValueError:
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

    logger.warning(
        "Unparseable %s timestamp %r; using current time",
        provider.value,
        raw,
        extra={"provider": provider.value, "raw_time": raw},
    )
    return datetime.now(timezone.utc)
