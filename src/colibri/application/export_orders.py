"""Application service: Export Orders use case (query).

Flattens aggregates back into one row per line item for a spreadsheet.
An order without items still gets one row, with the item cells empty.
"""

from __future__ import annotations

from datetime import timezone, tzinfo
from typing import Iterable

from colibri.application.dto import ExportRow
from colibri.domain.model.order import OrderAggregate


class ExportOrdersHandler:

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    def handle(self, orders: Iterable[OrderAggregate]) -> list[ExportRow]:
        rows: list[ExportRow] = []
        for order in orders:
            date = order.created_at.astimezone(self._tz).strftime("%Y-%m-%d")
            common = dict(
                order_code=order.order_code,
                client=order.client.name or "",
                state=order.state.value,
                date=date,
            )
            if not order.items:
                rows.append(
                    ExportRow(product="", quantity=None, unit_price=None, shipping=None, **common)
                )
                continue
            for item in order.items:
                rows.append(
                    ExportRow(
                        product=item.product_name,
                        quantity=item.quantity,
                        unit_price=item.unit_price.amount,
                        shipping=item.shipping.amount,
                        **common,
                    )
                )
        return rows
