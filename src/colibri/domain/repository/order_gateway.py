"""Abstract gateway to the backend that owns every order.

Defined in the domain layer so the domain never depends on
infrastructure.  The backend is the single source of truth: it stores
orders, clients, items and the audit log, and enforces the uniqueness
of order codes per channel.  All calls are asynchronous.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from colibri.domain.model.catalog import Carrier, Channel
from colibri.domain.model.order import ClientInfo, LineItem
from colibri.domain.model.order_state import OrderState


@dataclass(frozen=True)
class CreatedOrder:
    order_id: str
    item_ids: tuple[str, ...] = ()


class OrderGateway(ABC):

    @abstractmethod
    async def fetch_all(self) -> Any:
        """Return the raw flattened order view, soft-deleted rows included.

        A well-behaved backend returns a list of records; anything else
        is treated by callers as a bad payload.
        """

    @abstractmethod
    async def list_order_codes(self) -> set[str]:
        """Return every order code currently stored, across all channels."""

    @abstractmethod
    async def create_order(
        self,
        channel_id: str,
        order_code: str,
        client: ClientInfo | None,
        items: Sequence[LineItem],
        tracking_number: str | None = None,
        carrier_id: str | None = None,
        user: str | None = None,
    ) -> CreatedOrder:
        """Create an order with its client and items.

        Raises DuplicateOrderCodeError if the code is taken in the channel.
        """

    @abstractmethod
    async def update_order(
        self,
        order_id: str,
        channel_id: str,
        order_code: str,
        state: OrderState,
        client: ClientInfo | None,
        items: Sequence[LineItem],
        tracking_number: str | None = None,
        carrier_id: str | None = None,
        user: str | None = None,
    ) -> None:
        """Replace the header, the client and the whole item set."""

    @abstractmethod
    async def soft_delete_order(self, order_id: str, user: str | None = None) -> None:
        """Mark an order as ``eliminada`` and stamp its delete time."""

    @abstractmethod
    async def restore_order(self, order_id: str, user: str | None = None) -> None:
        """Move a deleted order to ``restaurada`` and clear its delete time."""

    @abstractmethod
    async def delete_item(self, item_id: str) -> str:
        """Delete one line item and return the id of its order."""

    @abstractmethod
    async def hard_delete_order(self, order_id: str) -> None:
        """Remove an order and everything that hangs off it."""

    @abstractmethod
    async def list_channels(self) -> list[Channel]:
        """Return every sales channel ordered by name."""

    @abstractmethod
    async def list_carriers(self, include_inactive: bool = False) -> list[Carrier]:
        """Return carriers ordered by name."""

    @abstractmethod
    async def create_carrier(self, name: str) -> Carrier:
        """Create an active carrier."""
