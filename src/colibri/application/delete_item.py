"""Application service: Delete Item use case (one line item, not the order)."""

from __future__ import annotations

import logging

from colibri.application.dto import ActionResult
from colibri.application.edit_session import Confirm
from colibri.application.live_view import LiveViewController
from colibri.domain.exceptions import DomainException
from colibri.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)


class DeleteItemHandler:

    PROMPT = "Delete this item?"

    def __init__(
        self,
        gateway: OrderGateway,
        live_view: LiveViewController,
        confirm: Confirm,
    ) -> None:
        self._gateway = gateway
        self._live_view = live_view
        self._confirm = confirm

    async def handle(self, item_id: str) -> ActionResult:
        """Delete the item; the result data is the id of its order."""
        if not item_id:
            return ActionResult.failure("Item id not provided")
        if not self._confirm(self.PROMPT):
            return ActionResult.failure("Delete cancelled")

        try:
            order_id = await self._gateway.delete_item(item_id)
        except DomainException as exc:
            logger.warning("Deleting item %s failed: %s", item_id, exc)
            return ActionResult.failure(str(exc))

        await self._live_view.refresh()
        return ActionResult.success("Item deleted", data=order_id)
