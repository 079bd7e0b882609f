"""Application service: one create/edit order session.

A session is bound to a single open order dialog.  When it opens it
captures a snapshot of the form values and the extra line items; every
later decision is taken against that snapshot:

- closing a clean session is silent,
- closing a dirty session asks the user, and on confirmation rolls the
  form back to the snapshot,
- closing right after a successful save is silent, because committed
  changes are not unsaved changes.

Only one session may be open at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable

from colibri.application.dto import SubmitResult
from colibri.application.forms import (
    ClientForm,
    ItemInput,
    OrderForm,
    validate_order_form,
)
from colibri.application.live_view import LiveViewController
from colibri.domain.exceptions import DomainException, EditSessionError, ValidationError
from colibri.domain.model.catalog import Carrier
from colibri.domain.model.order import LineItem, OrderAggregate
from colibri.domain.model.order_state import check_direct_transition
from colibri.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

SAVE_PROMPT = "Save the changes to this order?"
DISCARD_PROMPT = "There are unsaved changes. Discard them?"


@dataclass(frozen=True)
class EditSnapshot:
    form: OrderForm
    extra_items: tuple[ItemInput, ...]


class EditSessionReconciler:

    def __init__(
        self,
        gateway: OrderGateway,
        live_view: LiveViewController,
        confirm: Confirm,
        user: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._live_view = live_view
        self._confirm = confirm
        self._user = user
        self._open = False
        self._editing: OrderAggregate | None = None
        self._form = OrderForm()
        self._extra_items: tuple[ItemInput, ...] = ()
        self._snapshot: EditSnapshot | None = None
        self._just_committed = False

    # --- Read-only state ------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def editing(self) -> OrderAggregate | None:
        return self._editing

    @property
    def form(self) -> OrderForm:
        return self._form

    @property
    def extra_items(self) -> tuple[ItemInput, ...]:
        return self._extra_items

    @property
    def snapshot(self) -> EditSnapshot | None:
        return self._snapshot

    # --- Opening --------------------------------------------------------------

    def open(
        self,
        existing: OrderAggregate | None = None,
        carriers: Iterable[Carrier] = (),
    ) -> None:
        if self._open:
            raise EditSessionError("An edit session is already open")

        if existing is None:
            self._form = OrderForm()
            self._extra_items = ()
        else:
            self._form = _form_from(existing, carriers)
            self._extra_items = tuple(ItemInput.from_line_item(i) for i in existing.items[1:])

        self._editing = existing
        self._snapshot = EditSnapshot(form=self._form, extra_items=self._extra_items)
        self._just_committed = False
        self._open = True
        logger.debug("Edit session opened for %s", existing.order_code if existing else "a new order")

    # --- Editing --------------------------------------------------------------

    def edit(self, **changes: Any) -> None:
        self._require_open()
        self._form = replace(self._form, **changes)

    def edit_client(self, **changes: Any) -> None:
        self._require_open()
        self._form = replace(self._form, client=replace(self._form.client, **changes))

    def add_extra_item(self, item: ItemInput | None = None) -> None:
        self._require_open()
        self._extra_items = self._extra_items + (item or ItemInput(),)

    def update_extra_item(self, index: int, **changes: Any) -> None:
        self._require_open()
        items = list(self._extra_items)
        items[index] = replace(items[index], **changes)
        self._extra_items = tuple(items)

    def remove_extra_item(self, index: int) -> None:
        self._require_open()
        items = list(self._extra_items)
        del items[index]
        self._extra_items = tuple(items)

    # --- Dirty tracking -------------------------------------------------------

    def is_dirty(self) -> bool:
        if self._snapshot is None:
            return False
        return (
            self._form != self._snapshot.form
            or self._extra_items != self._snapshot.extra_items
        )

    def revert(self) -> None:
        """Roll the form and extra items back to the snapshot."""
        if self._snapshot is not None:
            self._form = self._snapshot.form
            self._extra_items = self._snapshot.extra_items

    def close(self, force_discard: bool = False) -> bool:
        """Close the session; return False if the user chose to keep editing."""
        if not self._open:
            return True

        if self._just_committed or not self.is_dirty():
            self._end()
            return True

        if not force_discard and not self._confirm(DISCARD_PROMPT):
            return False

        self.revert()
        self._end()
        return True

    def _end(self) -> None:
        self._open = False
        self._editing = None
        self._snapshot = None
        self._just_committed = False

    # --- Submitting -----------------------------------------------------------

    async def submit(self) -> SubmitResult:
        self._require_open()

        errors = validate_order_form(self._form, self._extra_items)
        current_state = self._editing.state if self._editing else None
        try:
            check_direct_transition(current_state, self._form.state)
        except ValidationError as exc:
            errors.append(str(exc))
        if errors:
            return SubmitResult(ok=False, message="The order has invalid fields", errors=tuple(errors))

        if not self._confirm(SAVE_PROMPT):
            return SubmitResult(ok=False, message="Save cancelled")

        form = self._form
        items = self.merged_items()
        try:
            if self._editing is not None:
                order_id = self._editing.id
                await self._gateway.update_order(
                    order_id=order_id,
                    channel_id=form.channel_id,
                    order_code=form.order_code.strip(),
                    state=form.state,
                    client=form.client.to_client_info(),
                    items=items,
                    tracking_number=form.tracking_number.strip() or None,
                    carrier_id=form.carrier_id or None,
                    user=self._user,
                )
                message = "Order updated"
            else:
                created = await self._gateway.create_order(
                    channel_id=form.channel_id,
                    order_code=form.order_code.strip(),
                    client=form.client.to_client_info(),
                    items=items,
                    tracking_number=form.tracking_number.strip() or None,
                    carrier_id=form.carrier_id or None,
                    user=self._user,
                )
                order_id = created.order_id
                message = "Order created"
        except DomainException as exc:
            logger.warning("Saving order %s failed: %s", form.order_code, exc)
            return SubmitResult(ok=False, message=str(exc))

        self._just_committed = True
        logger.info("%s: %s", message, form.order_code)
        await self._live_view.refresh()
        return SubmitResult(ok=True, message=message, order_id=order_id)

    def merged_items(self) -> list[LineItem]:
        """Primary item first, then the non-blank extra rows in order."""
        primary = self._form.primary_item.to_line_item(self._form.item_id or None)
        extras = [item.to_line_item() for item in self._extra_items if not item.is_blank]
        return [primary, *extras]

    # --- Internal helpers -----------------------------------------------------

    def _require_open(self) -> None:
        if not self._open:
            raise EditSessionError("No edit session is open")


def _form_from(order: OrderAggregate, carriers: Iterable[Carrier]) -> OrderForm:
    primary = ItemInput.from_line_item(order.primary_item) if order.primary_item else ItemInput()
    carrier_id = ""
    if order.carrier:
        carrier_id = next((c.id for c in carriers if c.name == order.carrier), "")
    return OrderForm(
        channel_id=order.channel_id or "",
        order_code=order.order_code,
        state=order.state,
        client=ClientForm.from_client(order.client),
        item_id=(order.primary_item.item_id or "") if order.primary_item else "",
        sku=primary.sku,
        product_name=primary.product_name,
        quantity=primary.quantity,
        unit_price=primary.unit_price,
        shipping=primary.shipping,
        tracking_number=order.tracking_number or "",
        carrier_id=carrier_id,
    )
