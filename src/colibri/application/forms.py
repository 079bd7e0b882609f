"""Edit-form values and their field-level validation.

Form values are frozen dataclasses: editing replaces them, so a snapshot
taken when a session opens can be compared against, and restored from,
without copying.  Validation runs before any remote call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal

from colibri.domain.model.order import ClientInfo, LineItem
from colibri.domain.model.order_state import INITIAL_STATE, OrderState
from colibri.domain.model.value_objects import Money

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class ClientForm:
    name: str = ""
    document: str = ""
    city: str = ""
    department: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    @staticmethod
    def from_client(client: ClientInfo) -> ClientForm:
        return ClientForm(
            name=client.name or "",
            document=client.document or "",
            city=client.city or "",
            department=client.department or "",
            email=client.email or "",
            phone=client.phone or "",
            address=client.address or "",
        )

    def to_client_info(self) -> ClientInfo:
        return ClientInfo(
            name=_clean(self.name),
            document=_clean(self.document),
            city=_clean(self.city),
            department=_clean(self.department),
            email=_clean(self.email),
            phone=_clean(self.phone),
            address=_clean(self.address),
        )


@dataclass(frozen=True)
class ItemInput:
    """An editable line item (the primary one or an extra row)."""

    sku: str = ""
    product_name: str = ""
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")

    @property
    def is_blank(self) -> bool:
        return not self.sku.strip() and not self.product_name.strip()

    @staticmethod
    def from_line_item(item: LineItem) -> ItemInput:
        return ItemInput(
            sku=item.sku or "",
            product_name=item.product_name,
            quantity=item.quantity or 1,
            unit_price=item.unit_price.amount,
            shipping=item.shipping.amount,
        )

    def to_line_item(self, item_id: str | None = None) -> LineItem:
        return LineItem(
            item_id=item_id,
            sku=_clean(self.sku),
            product_name=self.product_name.strip() or self.sku.strip(),
            quantity=int(self.quantity),
            unit_price=Money.of(self.unit_price),
            shipping=Money.of(self.shipping),
        )


@dataclass(frozen=True)
class OrderForm:
    """Header fields plus the primary line item of the order dialog."""

    channel_id: str = ""
    order_code: str = ""
    state: OrderState = INITIAL_STATE
    client: ClientForm = field(default_factory=ClientForm)
    item_id: str = ""
    sku: str = ""
    product_name: str = ""
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    tracking_number: str = ""
    carrier_id: str = ""

    @property
    def primary_item(self) -> ItemInput:
        return ItemInput(
            sku=self.sku,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            shipping=self.shipping,
        )


def validate_order_form(form: OrderForm, extra_items: tuple[ItemInput, ...] = ()) -> list[str]:
    """Return every field error; an empty list means the form is valid."""
    errors: list[str] = []

    if not form.channel_id.strip():
        errors.append("A sales channel must be selected")
    if len(form.order_code.strip()) < 2:
        errors.append("The order code is required")
    if len(form.client.name.strip()) < 2:
        errors.append("The client name is required")
    if form.client.email.strip() and not _EMAIL.match(form.client.email.strip()):
        errors.append("The client email must be valid")
    if form.client.phone.strip() and not _DIGITS.match(form.client.phone.strip()):
        errors.append("The client phone must contain only digits")

    if not form.sku.strip():
        errors.append("The SKU is required")
    if len(form.product_name.strip()) < 2:
        errors.append("The product is required")
    errors.extend(_item_errors(form.primary_item, "Item 1"))

    for index, item in enumerate(extra_items, start=2):
        if item.is_blank:
            continue
        errors.extend(_item_errors(item, f"Item {index}"))
    return errors


def _item_errors(item: ItemInput, label: str) -> list[str]:
    errors: list[str] = []
    if not isinstance(item.quantity, int) or item.quantity < 1:
        errors.append(f"{label}: quantity must be greater than 0")
    if Decimal(item.unit_price) < 0:
        errors.append(f"{label}: price cannot be negative")
    if Decimal(item.shipping) < 0:
        errors.append(f"{label}: shipping cannot be negative")
    return errors


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
