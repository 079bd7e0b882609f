"""Unit tests for the in-process change feed."""

from colibri.domain.repository.change_feed import ORDERS_TABLE, ChangeEvent, ChangeKind
from colibri.infrastructure.realtime.local_change_feed import LocalChangeFeed


class TestLocalChangeFeed:

    def test_delivers_to_table_subscribers_in_order(self):
        feed = LocalChangeFeed()
        seen: list[str] = []
        feed.subscribe(ORDERS_TABLE, lambda e: seen.append("first"))
        feed.subscribe(ORDERS_TABLE, lambda e: seen.append("second"))
        feed.subscribe("orden_items", lambda e: seen.append("items"))
        feed.publish(ChangeEvent(ORDERS_TABLE, ChangeKind.INSERT))
        assert seen == ["first", "second"]

    def test_cancel_is_idempotent(self):
        feed = LocalChangeFeed()
        seen: list[ChangeEvent] = []
        subscription = feed.subscribe(ORDERS_TABLE, seen.append)
        subscription.cancel()
        subscription.cancel()
        feed.publish(ChangeEvent(ORDERS_TABLE, ChangeKind.DELETE))
        assert seen == []
        assert feed.subscriber_count(ORDERS_TABLE) == 0

    def test_publish_without_subscribers(self):
        LocalChangeFeed().publish(ChangeEvent(ORDERS_TABLE, ChangeKind.UPDATE))
