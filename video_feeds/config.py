"""Configuration loading for the videos widget."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from xml.etree import ElementTree as ET

from .models import PLAYLIST_PREFIX
from .workers import DEFAULT_WORKERS

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 25
DEFAULT_COLLAPSE_AFTER = 7
DEFAULT_COLLAPSE_AFTER_ROWS = 4


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class WidgetConfig:
    title: str = "Videos"
    channels: List[str] = field(default_factory=list)
    rumble_channels: List[str] = field(default_factory=list)
    playlists: List[str] = field(default_factory=list)
    video_url_template: str = ""
    style: str = ""
    limit: int = 0
    include_shorts: bool = False
    collapse_after: int = 0
    collapse_after_rows: int = 0
    concurrency: int = DEFAULT_WORKERS
    timeout: float = 10.0
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def effective_limit(limit: Optional[int]) -> int:
    """Return ``limit`` or the default when it is unset or not positive."""
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    return limit


def youtube_sources(config: WidgetConfig) -> List[str]:
    """Return the YouTube identifiers: channels, then ``playlist:``-prefixed playlists."""
    sources = list(config.channels)
    sources.extend(PLAYLIST_PREFIX + playlist for playlist in config.playlists)
    return sources


def apply_defaults(config: WidgetConfig) -> WidgetConfig:
    """Return a copy of ``config`` with widget defaults filled in."""
    collapse_after_rows = config.collapse_after_rows
    if collapse_after_rows == 0 or collapse_after_rows < -1:
        collapse_after_rows = DEFAULT_COLLAPSE_AFTER_ROWS

    collapse_after = config.collapse_after
    if collapse_after == 0 or collapse_after < -1:
        collapse_after = DEFAULT_COLLAPSE_AFTER

    return dataclasses.replace(
        config,
        limit=effective_limit(config.limit),
        collapse_after=collapse_after,
        collapse_after_rows=collapse_after_rows,
    )


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _text_list(root: ET.Element, tag: str) -> List[str]:
    node = root.find(tag)
    if node is None:
        return []
    values = []
    for child in node:
        if child.text and child.text.strip():
            values.append(child.text.strip())
    return values


def _int_value(root: ET.Element, tag: str, default: int) -> int:
    raw = root.findtext(tag)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"<{tag}> must be an integer, got {raw.strip()!r}")


def parse_widget_config(path: str) -> WidgetConfig:
    """Parse the widget configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading widget configuration from %s", config_path)
    try:
        tree = ET.parse(config_path)
    except ET.ParseError as exc:
        raise ValueError(f"Config file is not valid XML: {exc}")
    root = tree.getroot()

    timeout_raw = (root.findtext("timeout") or "").strip()
    try:
        timeout = float(timeout_raw) if timeout_raw else 10.0
    except ValueError:
        raise ValueError(f"<timeout> must be a number, got {timeout_raw!r}")

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    config = WidgetConfig(
        title=(root.findtext("title") or "Videos").strip(),
        channels=_text_list(root, "channels"),
        rumble_channels=_text_list(root, "rumble-channels"),
        playlists=_text_list(root, "playlists"),
        video_url_template=(root.findtext("video-url-template") or "").strip(),
        style=(root.findtext("style") or "").strip(),
        limit=_int_value(root, "limit", 0),
        include_shorts=root.findtext("include-shorts", "false").strip().lower() == "true",
        collapse_after=_int_value(root, "collapse-after", 0),
        collapse_after_rows=_int_value(root, "collapse-after-rows", 0),
        concurrency=_int_value(root, "concurrency", DEFAULT_WORKERS),
        timeout=timeout,
        logging=logging_config,
    )
    logger.info(
        "Loaded %d YouTube channels, %d playlists and %d Rumble channels",
        len(config.channels),
        len(config.playlists),
        len(config.rumble_channels),
    )
    return config
