"""Integration tests for the bulk import use case."""

import asyncio
from decimal import Decimal

from colibri.application.bulk_import import (
    REPEATED_FILE_MESSAGE,
    BulkImportHandler,
    estimated_total,
    group_rows,
    has_repeated_sku,
)
from colibri.application.dto import ImportGroupStatus, ImportRow
from colibri.application.live_view import LiveViewController
from colibri.domain.exceptions import BackendError
from colibri.domain.model.value_objects import Money
from tests.fakes import FakeChangeFeed, FakeOrderGateway


def _rows() -> list[ImportRow]:
    return [
        ImportRow("ORD-1", "S1", 2, "Café", Decimal("100"), Decimal("10"), client_name="Ana",
                  client_phone="3001234567"),
        ImportRow("ORD-2", "S1", 1, "Café", Decimal("100")),
        ImportRow("ORD-1", "S2", 1, "", Decimal("50")),
        ImportRow("ORD-3", "S5", 1, "Miel"),
        ImportRow("ORD-3", "S5", 2, "Miel"),
        ImportRow("OLD-1", "S1", 1, "Café"),
    ]


def _setup() -> tuple[BulkImportHandler, FakeOrderGateway]:
    gateway = FakeOrderGateway()
    gateway.codes.add("OLD-1")
    view = LiveViewController(gateway, FakeChangeFeed())
    return BulkImportHandler(gateway, view, user="ops"), gateway


class TestHelpers:

    def test_group_rows_keeps_first_seen_order(self):
        groups = group_rows(_rows())
        assert list(groups) == ["ORD-1", "ORD-2", "ORD-3", "OLD-1"]
        assert [r.sku for r in groups["ORD-1"]] == ["S1", "S2"]

    def test_repeated_sku(self):
        groups = group_rows(_rows())
        assert has_repeated_sku(groups["ORD-3"])
        assert not has_repeated_sku(groups["ORD-1"])

    def test_estimated_total(self):
        assert estimated_total(group_rows(_rows())["ORD-1"]) == Decimal("260")


class TestPreview:

    def test_statuses(self):
        handler, _ = _setup()
        preview = asyncio.run(handler.preview(_rows()))
        statuses = {g.order_code: g.status for g in preview.groups}
        assert statuses == {
            "ORD-1": ImportGroupStatus.NEW,
            "ORD-2": ImportGroupStatus.NEW,
            "ORD-3": ImportGroupStatus.REPEATED_SKU,
            "OLD-1": ImportGroupStatus.EXISTING,
        }
        assert preview.row_count == 6
        assert preview.groups[0].client_name == "Ana"


class TestImport:

    def test_creates_new_groups_only(self):
        handler, gateway = _setup()
        report = asyncio.run(handler.handle("ch-1", _rows()))
        assert report.ok
        assert report.created == ("ORD-1", "ORD-2")
        assert report.skipped_existing == ("OLD-1",)
        assert report.rejected_repeated_sku == ("ORD-3",)
        assert report.summary == "2 created, 1 already existing, 1 with repeated SKU"
        assert gateway.names() == ["create_order", "create_order"]
        assert gateway.fetch_count == 1

    def test_order_payload(self):
        handler, gateway = _setup()
        asyncio.run(handler.handle("ch-1", _rows()))
        call = gateway.calls[0][1]
        assert call["channel_id"] == "ch-1"
        assert call["user"] == "ops"
        assert call["client"].name == "Ana"
        assert call["client"].phone == "3001234567"
        items = call["items"]
        assert [i.sku for i in items] == ["S1", "S2"]
        assert items[0].shipping == Money.of(10)
        assert items[1].product_name == "S2"

    def test_group_without_client_data_sends_no_client(self):
        handler, gateway = _setup()
        asyncio.run(handler.handle("ch-1", _rows()))
        assert gateway.calls[1][1]["client"] is None

    def test_code_taken_during_import_is_skipped(self):
        handler, gateway = _setup()
        original = gateway.list_order_codes

        async def stale_codes():
            codes = await original()
            gateway.codes.add("ORD-2")
            return codes

        gateway.list_order_codes = stale_codes  # type: ignore[method-assign]
        report = asyncio.run(handler.handle("ch-1", _rows()))
        assert report.ok
        assert report.created == ("ORD-1",)
        assert "ORD-2" in report.skipped_existing

    def test_backend_failure_stops_and_reports_progress(self):
        handler, gateway = _setup()
        calls = 0
        original = gateway.create_order

        async def flaky(**kwargs):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise BackendError("Backend unreachable")
            return await original(**kwargs)

        gateway.create_order = flaky  # type: ignore[method-assign]
        report = asyncio.run(handler.handle("ch-1", _rows()))
        assert not report.ok
        assert report.error == "Error importing order ORD-2: Backend unreachable"
        assert report.created == ("ORD-1",)

    def test_same_file_twice_is_refused(self):
        handler, gateway = _setup()
        asyncio.run(handler.handle("ch-1", _rows()))
        report = asyncio.run(handler.handle("ch-1", _rows()))
        assert not report.ok
        assert "already imported" in report.error
        assert len(gateway.calls) == 2

    def test_digest_from_earlier_run_is_refused(self):
        first, _ = _setup()
        asyncio.run(first.handle("ch-1", _rows()))

        gateway = FakeOrderGateway()
        handler = BulkImportHandler(gateway, user="ops", last_digest=first.last_digest)
        assert handler.is_repeat(_rows())
        report = asyncio.run(handler.handle("ch-1", _rows()))
        assert report.error == REPEATED_FILE_MESSAGE
        assert gateway.calls == []

    def test_fresh_handler_has_no_digest(self):
        handler, _ = _setup()
        assert handler.last_digest is None
        assert not handler.is_repeat(_rows())
        assert not handler.is_repeat([])

    def test_changed_file_is_accepted_again(self):
        handler, gateway = _setup()
        asyncio.run(handler.handle("ch-1", _rows()))
        report = asyncio.run(handler.handle("ch-1", _rows() + [ImportRow("ORD-9", "S1", 1)]))
        assert report.created == ("ORD-9",)

    def test_channel_required(self):
        handler, gateway = _setup()
        report = asyncio.run(handler.handle("", _rows()))
        assert report.error == "A sales channel must be selected"
        assert gateway.calls == []

    def test_no_rows(self):
        handler, _ = _setup()
        assert asyncio.run(handler.handle("ch-1", [])).error == "The file has no rows"
