"""Videos widget state and its progressive refresh interval."""

from __future__ import annotations

import dataclasses
import logging
import threading
from datetime import timedelta
from typing import Optional

import requests
from markupsafe import Markup

from .aggregator import aggregate
from .config import WidgetConfig, apply_defaults
from .errors import UpdateInProgressError
from .feeds import create_session
from .models import AggregationResult, WidgetState
from .renderers import render_widget

logger = logging.getLogger(__name__)

INITIAL_REFRESH_INTERVAL = timedelta(minutes=1)
FIRST_LOAD_REFRESH_INTERVAL = timedelta(seconds=3)
STEADY_REFRESH_INTERVAL = timedelta(minutes=30)


def initial_state() -> WidgetState:
    return WidgetState(
        is_first_load=True,
        content_available=False,
        refresh_interval=INITIAL_REFRESH_INTERVAL,
    )


def begin_cycle(state: WidgetState) -> WidgetState:
    """Leave the first-load state, asking for a very short refresh once."""
    if state.is_first_load and not state.content_available:
        logger.info("Video widget first load - fetching videos with short cache")
        return dataclasses.replace(
            state,
            is_first_load=False,
            refresh_interval=FIRST_LOAD_REFRESH_INTERVAL,
        )
    return state


def complete_cycle(state: WidgetState, result: AggregationResult) -> WidgetState:
    """Publish the items of a finished cycle and extend the refresh interval."""
    logger.info("Videos fetched - extending cache duration to %s", STEADY_REFRESH_INTERVAL)
    return dataclasses.replace(
        state,
        items=tuple(result.items),
        content_available=True,
        refresh_interval=STEADY_REFRESH_INTERVAL,
        last_result=result,
    )


class VideosWidget:
    """Owns the state of one widget instance and runs its update cycles.

    Cycles are single-flight and the state is replaced in one assignment
    once a cycle completes, so a cancelled cycle publishes nothing.
    """

    def __init__(
        self,
        config: WidgetConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = apply_defaults(config)
        self.session = session if session is not None else create_session()
        self._state = initial_state()
        self._update_lock = threading.Lock()

    @property
    def state(self) -> WidgetState:
        return self._state

    @property
    def refresh_interval(self) -> timedelta:
        return self._state.refresh_interval

    def update(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> WidgetState:
        """Run one update cycle and return the published state.

        ``timeout`` sets ``cancel`` (created if needed) after that many
        seconds. Raises UpdateInProgressError when a cycle is already running
        and UpdateCancelledError when the cycle was cancelled.
        """
        if not self._update_lock.acquire(blocking=False):
            raise UpdateInProgressError("an update cycle is already running")

        timer: Optional[threading.Timer] = None
        try:
            if timeout is not None:
                cancel = cancel if cancel is not None else threading.Event()
                timer = threading.Timer(timeout, cancel.set)
                timer.daemon = True
                timer.start()

            pending = begin_cycle(self._state)
            result = aggregate(self.config, self.session, cancel=cancel)
            self._state = complete_cycle(pending, result)
            logger.info("Video content now available: %d videos", len(self._state.items))
            return self._state
        finally:
            if timer is not None:
                timer.cancel()
            self._update_lock.release()

    def render(self) -> Markup:
        return render_widget(
            self._state,
            style=self.config.style,
            title=self.config.title,
            collapse_after=self.config.collapse_after,
            collapse_after_rows=self.config.collapse_after_rows,
        )
