"""Unit tests for flattening aggregates into export rows."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from colibri.application.export_orders import ExportOrdersHandler
from colibri.domain.model.order import ClientInfo, LineItem, OrderAggregate
from colibri.domain.model.order_state import OrderState
from colibri.domain.model.value_objects import Money


def _order(items: tuple[LineItem, ...] = ()) -> OrderAggregate:
    return OrderAggregate(
        id="1",
        order_code="A-1",
        channel_id="ch-1",
        state=OrderState.POR_FACTURAR,
        created_at=datetime(2024, 5, 2, 3, 0, tzinfo=timezone.utc),
        client=ClientInfo(name="Ana"),
        items=items,
    )


class TestExportOrders:

    def test_one_row_per_item(self):
        order = _order((
            LineItem(sku="S1", product_name="Café", quantity=2, unit_price=Money.of("100"),
                     shipping=Money.of("10")),
            LineItem(sku="S2", product_name="Té", quantity=1, unit_price=Money.of("50")),
        ))
        rows = ExportOrdersHandler().handle([order])
        assert [r.product for r in rows] == ["Café", "Té"]
        assert rows[0].quantity == 2
        assert rows[0].unit_price == Decimal("100")
        assert rows[0].shipping == Decimal("10")
        assert rows[1].order_code == "A-1"
        assert rows[1].client == "Ana"
        assert rows[1].state == "por facturar"

    def test_order_without_items_keeps_one_row(self):
        rows = ExportOrdersHandler().handle([_order()])
        assert len(rows) == 1
        assert rows[0].product == ""
        assert rows[0].quantity is None
        assert rows[0].unit_price is None

    def test_date_in_local_zone(self):
        bogota = timezone(timedelta(hours=-5))
        assert ExportOrdersHandler().handle([_order()])[0].date == "2024-05-02"
        assert ExportOrdersHandler(bogota).handle([_order()])[0].date == "2024-05-01"

    def test_no_orders(self):
        assert ExportOrdersHandler().handle([]) == []
