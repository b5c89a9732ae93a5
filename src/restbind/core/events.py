"""Per-instance event registry for collections and records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class Event(str, Enum):
    BEFORE_FETCH = "before-fetch"
    AFTER_FETCH = "after-fetch"
    AFTER_FETCH_ERROR = "after-fetch-error"
    AFTER_FEED = "after-feed"
    AFTER_ADD = "after-add"
    AFTER_REMOVE = "after-remove"
    BEFORE_SAVE = "before-save"
    AFTER_SAVE = "after-save"
    AFTER_SAVE_ERROR = "after-save-error"
    BEFORE_DESTROY = "before-destroy"
    AFTER_DESTROY = "after-destroy"
    AFTER_DESTROY_ERROR = "after-destroy-error"


class EventBus:
    """Dispatch named lifecycle events to registered handlers.

    Handlers run synchronously, in registration order. A handler that raises is
    logged and skipped; the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[Event, list[Handler]] = {}

    def on(self, event: Event | str, handler: Handler) -> Handler:
        self._handlers.setdefault(Event(event), []).append(handler)
        return handler

    def off(self, event: Event | str, handler: Handler) -> None:
        handlers = self._handlers.get(Event(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: Event | str) -> list[Handler]:
        return list(self._handlers.get(Event(event), []))

    def emit(self, event: Event, *args: Any) -> None:
        # Snapshot so handlers may (un)register during dispatch
        for handler in self.handlers(event):
            try:
                handler(*args)
            except Exception:
                logger.exception("Error in %s handler %r", event.value, handler)
