"""OrderAggregate — the reconciled, in-memory view of one order.

Aggregates are rebuilt from the backend feed on every fetch and never
mutated afterwards; edits go through the edit session and only show up
here after the backend has accepted them and the view has been fetched
again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from colibri.domain.exceptions import ValidationError
from colibri.domain.model.order_state import OrderState
from colibri.domain.model.value_objects import Money


@dataclass(frozen=True)
class ClientInfo:
    """The client sub-record of an order.  Every field is optional."""

    name: str | None = None
    document: str | None = None
    city: str | None = None
    department: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.name, self.document, self.city, self.department,
             self.email, self.phone, self.address)
        )


@dataclass(frozen=True)
class LineItem:
    """One product line of an order.

    ``item_id`` is None for items that have not been persisted yet.
    """

    product_name: str
    quantity: int
    unit_price: Money = field(default_factory=Money.zero)
    shipping: Money = field(default_factory=Money.zero)
    sku: str | None = None
    item_id: str | None = None

    def __post_init__(self) -> None:
        if not self.product_name or not self.product_name.strip():
            raise ValidationError("Line item product name is required")

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity + self.shipping


@dataclass(frozen=True)
class OrderAggregate:
    """One order with its line items in feed order."""

    id: str
    order_code: str
    channel_id: str | None
    state: OrderState
    created_at: datetime
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    client: ClientInfo = field(default_factory=ClientInfo)
    tracking_number: str | None = None
    carrier: str | None = None
    items: tuple[LineItem, ...] = ()

    @property
    def is_deleted(self) -> bool:
        return self.state is OrderState.ELIMINADA

    @property
    def primary_item(self) -> LineItem | None:
        return self.items[0] if self.items else None

    @property
    def total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result
