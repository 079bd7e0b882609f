"""Application services: soft-delete and hard-delete an order.

Soft delete moves the order to ``eliminada`` and stamps its delete time;
the rows stay in the backend and the order can be restored.  Hard delete
removes the order together with its client, items and audit entries.
Both ask the user first.
"""

from __future__ import annotations

import logging

from colibri.application.dto import ActionResult
from colibri.application.edit_session import Confirm
from colibri.application.live_view import LiveViewController
from colibri.domain.exceptions import DomainException
from colibri.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)


class DeleteOrderHandler:

    PROMPT = "Delete this order?"

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

    async def handle(self, order_id: str) -> ActionResult:
        if not order_id:
            return ActionResult.failure("Order id not provided")
        if not self._confirm(self.PROMPT):
            return ActionResult.failure("Delete cancelled")

        try:
            await self._gateway.soft_delete_order(order_id, user=self._user)
        except DomainException as exc:
            logger.warning("Deleting order %s failed: %s", order_id, exc)
            return ActionResult.failure(str(exc))

        await self._live_view.refresh()
        return ActionResult.success("Order deleted")


class PurgeOrderHandler:

    PROMPT = "Permanently remove this order and all of its items? This cannot be undone."

    def __init__(
        self,
        gateway: OrderGateway,
        live_view: LiveViewController,
        confirm: Confirm,
    ) -> None:
        self._gateway = gateway
        self._live_view = live_view
        self._confirm = confirm

    async def handle(self, order_id: str) -> ActionResult:
        if not order_id:
            return ActionResult.failure("Order id not provided")
        if not self._confirm(self.PROMPT):
            return ActionResult.failure("Removal cancelled")

        try:
            await self._gateway.hard_delete_order(order_id)
        except DomainException as exc:
            logger.warning("Removing order %s failed: %s", order_id, exc)
            return ActionResult.failure(str(exc))

        await self._live_view.refresh()
        return ActionResult.success("Order removed")
