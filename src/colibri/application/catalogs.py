"""Application services: sales channels and carriers (query + create)."""

from __future__ import annotations

from colibri.application.dto import ActionResult
from colibri.domain.exceptions import DomainException
from colibri.domain.repository.order_gateway import OrderGateway


class ListChannelsHandler:

    def __init__(self, gateway: OrderGateway) -> None:
        self._gateway = gateway

    async def handle(self) -> ActionResult:
        try:
            channels = await self._gateway.list_channels()
        except DomainException as exc:
            return ActionResult.failure(f"Could not load channels: {exc}", data=[])
        return ActionResult.success(f"{len(channels)} channels", data=channels)


class ListCarriersHandler:

    def __init__(self, gateway: OrderGateway) -> None:
        self._gateway = gateway

    async def handle(self, include_inactive: bool = False) -> ActionResult:
        try:
            carriers = await self._gateway.list_carriers(include_inactive=include_inactive)
        except DomainException as exc:
            return ActionResult.failure(f"Could not load carriers: {exc}", data=[])
        return ActionResult.success(f"{len(carriers)} carriers", data=carriers)


class CreateCarrierHandler:

    def __init__(self, gateway: OrderGateway) -> None:
        self._gateway = gateway

    async def handle(self, name: str) -> ActionResult:
        clean = (name or "").strip()
        if not clean:
            return ActionResult.failure("Carrier name is required")
        try:
            carrier = await self._gateway.create_carrier(clean)
        except DomainException as exc:
            return ActionResult.failure(str(exc))
        return ActionResult.success(f"Carrier '{carrier.name}' created", data=carrier)
