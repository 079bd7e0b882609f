"""Application service: Restore Order use case.

Restoring a soft-deleted order lands it on ``restaurada``, never back on
the forward-flow state it had before it was deleted.
"""

from __future__ import annotations

import logging

from colibri.application.dto import ActionResult
from colibri.application.live_view import LiveViewController
from colibri.domain.exceptions import DomainException
from colibri.domain.model.order_state import OrderState
from colibri.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)


class RestoreOrderHandler:

    def __init__(
        self,
        gateway: OrderGateway,
        live_view: LiveViewController,
        user: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._live_view = live_view
        self._user = user

    async def handle(self, order_id: str) -> ActionResult:
        order = self._live_view.find(order_id)
        if order is not None and order.state is not OrderState.ELIMINADA:
            return ActionResult.failure(f"Order {order.order_code} is not deleted")

        try:
            await self._gateway.restore_order(order_id, user=self._user)
        except DomainException as exc:
            logger.warning("Restoring order %s failed: %s", order_id, exc)
            return ActionResult.failure(str(exc))

        await self._live_view.refresh()
        return ActionResult.success("Order restored")
