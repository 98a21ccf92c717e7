"""Rendering of widget state to HTML and JSON."""

from __future__ import annotations

import json
import logging

from markupsafe import Markup

from .models import WidgetState
from .templating import get_environment

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "videos.html.j2"
STYLE_TEMPLATES = {
    "grid-cards": "videos-grid.html.j2",
    "vertical-list": "videos-vertical-list.html.j2",
}
LOADING_TEMPLATE = "loading.html.j2"
LOADING_RELOAD_MS = 5000


def select_template(style: str) -> str:
    """Return the template name for ``style``, falling back to the default layout."""
    return STYLE_TEMPLATES.get(style, DEFAULT_TEMPLATE)


def render_widget(
    state: WidgetState,
    style: str = "",
    title: str = "Videos",
    collapse_after: int = 7,
    collapse_after_rows: int = 4,
) -> Markup:
    """Render the widget, or a self-reloading placeholder while loading."""
    env = get_environment()
    if not state.content_available:
        logger.debug("Rendering loading state for videos")
        template = env.get_template(LOADING_TEMPLATE)
        return Markup(template.render(title=title, reload_ms=LOADING_RELOAD_MS))

    template_name = select_template(style)
    logger.debug(
        "Rendering %d videos with %s (style=%r)", len(state.items), template_name, style
    )
    template = env.get_template(template_name)
    return Markup(
        template.render(
            title=title,
            videos=state.items,
            collapse_after=collapse_after,
            collapse_after_rows=collapse_after_rows,
        )
    )


def render_json(state: WidgetState) -> str:
    """Serialise the published items for non-HTML hosts."""
    payload = {
        "content_available": state.content_available,
        "refresh_interval_seconds": int(state.refresh_interval.total_seconds()),
        "status": state.last_result.status.value if state.last_result else None,
        "failed_count": state.last_result.failed_count if state.last_result else 0,
        "videos": [
            {
                "title": item.title,
                "url": item.url,
                "author": item.author,
                "author_url": item.author_url,
                "thumbnail_url": item.thumbnail_url,
                "time_posted": item.time_posted.isoformat(),
            }
            for item in state.items
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
