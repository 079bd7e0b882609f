"""In-process implementation of ChangeFeed.

Writers publish after every table they touch; handlers run
synchronously in registration order.
"""

from __future__ import annotations

import logging

from colibri.domain.repository.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeHandler,
    Subscription,
)

logger = logging.getLogger(__name__)


class _LocalSubscription(Subscription):

    def __init__(self, feed: LocalChangeFeed, table: str, handler: ChangeHandler) -> None:
        self._feed = feed
        self._table = table
        self._handler = handler
        self._active = True

    def cancel(self) -> None:
        if self._active:
            self._feed._remove(self._table, self._handler)
            self._active = False


class LocalChangeFeed(ChangeFeed):

    def __init__(self) -> None:
        self._handlers: dict[str, list[ChangeHandler]] = {}

    def subscribe(self, table: str, handler: ChangeHandler) -> Subscription:
        self._handlers.setdefault(table, []).append(handler)
        return _LocalSubscription(self, table, handler)

    def publish(self, event: ChangeEvent) -> None:
        handlers = list(self._handlers.get(event.table, []))
        logger.debug("%s on %s -> %d handlers", event.kind.value, event.table, len(handlers))
        for handler in handlers:
            handler(event)

    def subscriber_count(self, table: str) -> int:
        return len(self._handlers.get(table, []))

    def _remove(self, table: str, handler: ChangeHandler) -> None:
        handlers = self._handlers.get(table, [])
        if handler in handlers:
            handlers.remove(handler)
