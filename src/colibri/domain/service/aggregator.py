"""Domain service: fold flat view rows into order aggregates.

The backend view repeats the order header on every line-item row.  This
fold groups the rows by order id, keeps the ids in first-seen order so a
stable feed produces a stable aggregate order, and collects the line
items in the order their rows arrived.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from colibri.domain.model.flat_row import FlatRow
from colibri.domain.model.order import LineItem, OrderAggregate
from colibri.domain.model.value_objects import Money


@dataclass
class _Pending:
    header: FlatRow
    items: list[LineItem] = field(default_factory=list)


def aggregate(rows: Iterable[FlatRow]) -> list[OrderAggregate]:
    """Return one aggregate per distinct order id.

    Header fields are taken from the first row seen for each id.  Rows
    without an SKU or product name contribute no line item, so an order
    with zero items ends up with an empty ``items`` tuple.
    """
    pending: dict[str, _Pending] = {}

    for row in rows:
        entry = pending.get(row.order_id)
        if entry is None:
            entry = pending[row.order_id] = _Pending(header=row)
        if row.has_item:
            entry.items.append(_to_line_item(row))

    return [_to_aggregate(p) for p in pending.values()]


def _to_line_item(row: FlatRow) -> LineItem:
    return LineItem(
        item_id=row.item_id,
        sku=row.sku,
        product_name=row.product_name or row.sku,  # type: ignore[arg-type]
        quantity=row.quantity if row.quantity is not None else 1,
        unit_price=Money.of(row.unit_price),
        shipping=Money.of(row.shipping),
    )


def _to_aggregate(entry: _Pending) -> OrderAggregate:
    h = entry.header
    return OrderAggregate(
        id=h.order_id,
        order_code=h.order_code,
        channel_id=h.channel_id,
        state=h.state,
        created_at=h.created_at,
        updated_at=h.updated_at,
        deleted_at=h.deleted_at,
        client=h.client,
        tracking_number=h.tracking_number,
        carrier=h.carrier,
        items=tuple(entry.items),
    )
