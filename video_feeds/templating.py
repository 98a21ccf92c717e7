"""Jinja2 environment for video_feeds templates."""

from __future__ import annotations

from datetime import datetime, timezone
from importlib import resources

from jinja2 import Environment, FileSystemLoader, select_autoescape

_ENV: Environment | None = None


def _relative_time(value: datetime | None, now: datetime | None = None) -> str:
    """Format a timestamp as a short age such as ``5m`` or ``3d``."""
    if value is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = max(int((now - value).total_seconds()), 0)
    if seconds < 60:
        return "now"
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60)):
        if seconds >= size:
            return f"{seconds // size}{unit}"
    return "now"


def _isoformat(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["relative_time"] = _relative_time
        _ENV.filters["isoformat"] = _isoformat
    return _ENV
