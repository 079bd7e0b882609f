"""Application service: the live order view.

The controller owns the current aggregate collection.  It fetches the
flattened view from the backend, folds it into aggregates, and fetches
again whenever the change feed reports activity on any of the order
tables.  Consumers only ever see read-only projections.

Overlapping fetches are resolved by generation: every fetch takes the
next generation number and its result is applied only if no newer fetch
has been issued in the meantime.  A slow fetch that resolves after a
newer one is simply dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import timezone, tzinfo
from enum import Enum

from colibri.domain.exceptions import BackendError, DomainException
from colibri.domain.model.flat_row import FlatRow
from colibri.domain.model.order import OrderAggregate
from colibri.domain.model.order_state import OrderState
from colibri.domain.repository.change_feed import (
    ORDER_TABLES,
    ChangeEvent,
    ChangeFeed,
    Subscription,
)
from colibri.domain.repository.order_gateway import OrderGateway
from colibri.domain.service.aggregator import aggregate
from colibri.domain.service.projection import (
    Page,
    ViewParams,
    count_by_state,
    paginate,
    project,
)

logger = logging.getLogger(__name__)

BAD_PAYLOAD_MESSAGE = "Bad payload shape: the order view did not return a list of rows"


class ViewStatus(Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    FAILED = "FAILED"


class LiveViewController:

    def __init__(
        self,
        gateway: OrderGateway,
        change_feed: ChangeFeed,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self._gateway = gateway
        self._change_feed = change_feed
        self._tz = tz
        self._status = ViewStatus.IDLE
        self._orders: tuple[OrderAggregate, ...] = ()
        self._error: str | None = None
        self._generation = 0
        self._started = False
        self._subscriptions: list[Subscription] = []
        self._pending: set[asyncio.Task[None]] = set()

    # --- Read-only state ------------------------------------------------------

    @property
    def status(self) -> ViewStatus:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def orders(self) -> tuple[OrderAggregate, ...]:
        return self._orders

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loading(self) -> bool:
        return self._status is ViewStatus.LOADING

    def find(self, order_id: str) -> OrderAggregate | None:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def find_by_code(self, order_code: str) -> OrderAggregate | None:
        for order in self._orders:
            if order.order_code == order_code:
                return order
        return None

    # --- Lifecycle ------------------------------------------------------------

    async def start(self) -> None:
        """Subscribe to the order tables and perform the first fetch."""
        if not self._started:
            self._subscriptions = [
                self._change_feed.subscribe(table, self._on_change)
                for table in ORDER_TABLES
            ]
            self._started = True
        await self.fetch()

    def dispose(self) -> None:
        """Release the subscriptions and drop any scheduled fetch."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        for task in self._pending:
            task.cancel()
        self._pending.clear()
        self._started = False
        self._status = ViewStatus.IDLE

    async def settle(self) -> None:
        """Wait until every change-triggered fetch has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # --- Fetching -------------------------------------------------------------

    async def fetch(self) -> None:
        self._generation += 1
        generation = self._generation
        self._status = ViewStatus.LOADING

        try:
            payload = await self._gateway.fetch_all()
            orders = self._fold(payload)
        except DomainException as exc:
            if not self._is_stale(generation):
                logger.warning("Order fetch #%d failed: %s", generation, exc)
                self._fail(str(exc))
            return
        except Exception as exc:
            if not self._is_stale(generation):
                logger.exception("Order fetch #%d failed unexpectedly", generation)
                self._fail(str(exc) or type(exc).__name__)
            return

        if self._is_stale(generation):
            return
        logger.debug("Order fetch #%d applied: %d orders", generation, len(orders))
        self._orders = tuple(orders)
        self._error = None
        self._status = ViewStatus.READY

    async def refresh(self) -> None:
        """Manual refresh; identical to a change-triggered fetch."""
        await self.fetch()

    def _fail(self, message: str) -> None:
        self._orders = ()
        self._error = message
        self._status = ViewStatus.FAILED

    def _fold(self, payload: object) -> list[OrderAggregate]:
        if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
            logger.error("Order view returned %s instead of a list", type(payload).__name__)
            raise BackendError(BAD_PAYLOAD_MESSAGE)
        rows = [FlatRow.from_record(raw, self._tz) for raw in payload]
        return aggregate(rows)

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug(
                "Discarding stale order fetch #%d (latest is #%d)",
                generation, self._generation,
            )
            return True
        return False

    def _on_change(self, event: ChangeEvent) -> None:
        if not self._started:
            return
        logger.info("Change detected on %s (%s), refreshing", event.table, event.kind.value)
        task = asyncio.get_running_loop().create_task(self.fetch())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # --- Projections ----------------------------------------------------------

    def project(self, params: ViewParams) -> list[OrderAggregate]:
        return project(self._orders, params, self._tz)

    def state_counts(self, include_deleted: bool = False) -> dict[OrderState, int]:
        return count_by_state(self._orders, include_deleted)

    def page(self, params: ViewParams, number: int = 1, size: int = 20) -> Page:
        return paginate(self.project(params), number, size)
