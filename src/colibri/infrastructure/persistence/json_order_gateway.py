"""JSON-file-backed implementation of OrderGateway.

Stands in for the hosted backend: one JSON document holds the order,
client, item, audit-log, channel and carrier tables.  The read side
produces the same flattened, one-row-per-item view the hosted backend
serves, newest orders first.

Writes run as ordered steps (header, client, items).  Each step is
persisted and announced on the change feed on its own, a failing step
stops the write and is reported by name, and the audit entry is only
appended once every step has succeeded.  There is no rollback of the
steps that already ran.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Sequence

from colibri.domain.exceptions import (
    BackendError,
    DuplicateOrderCodeError,
    EntityNotFoundError,
    ValidationError,
)
from colibri.domain.model.catalog import Carrier, Channel
from colibri.domain.model.order import ClientInfo, LineItem
from colibri.domain.model.order_state import INITIAL_STATE, OrderState, deleted_at_for
from colibri.domain.repository.change_feed import (
    CLIENTS_TABLE,
    ITEMS_TABLE,
    ORDERS_TABLE,
    ChangeEvent,
    ChangeKind,
)
from colibri.domain.repository.order_gateway import CreatedOrder, OrderGateway
from colibri.infrastructure.realtime.local_change_feed import LocalChangeFeed

logger = logging.getLogger(__name__)

_TABLES = ("orders", "clients", "items", "logs", "channels", "carriers")

# (step name, watched table, event kind, mutation)
Step = tuple[str, str, ChangeKind, Callable[[dict], None]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JsonOrderGateway(OrderGateway):

    def __init__(
        self,
        file_path: Path,
        change_feed: LocalChangeFeed | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._file_path = file_path
        self._change_feed = change_feed
        self._clock = clock
        self._ensure_file()

    # --- Reads ----------------------------------------------------------------

    async def fetch_all(self) -> list[dict]:
        doc = self._load()
        carriers = {c["id"]: c["nombre"] for c in doc["carriers"]}
        rows: list[dict] = []
        orders = sorted(doc["orders"], key=lambda o: o["created_at"], reverse=True)
        for order in orders:
            header = self._view_header(order, doc, carriers)
            items = [i for i in doc["items"] if i["orden_id"] == order["id"]]
            if not items:
                rows.append({**header, **_EMPTY_ITEM})
                continue
            for item in items:
                rows.append({
                    **header,
                    "item_id": item["id"],
                    "sku": item["sku"],
                    "producto": item["producto"],
                    "cantidad": item["cantidad"],
                    "precio": item["precio"],
                    "flete": item["flete"],
                })
        return rows

    async def list_order_codes(self) -> set[str]:
        return {o["codigo_orden"] for o in self._load()["orders"]}

    async def list_channels(self) -> list[Channel]:
        channels = sorted(self._load()["channels"], key=lambda c: c["nombre"])
        return [Channel(id=c["id"], name=c["nombre"]) for c in channels]

    async def list_carriers(self, include_inactive: bool = False) -> list[Carrier]:
        carriers = sorted(self._load()["carriers"], key=lambda c: c["nombre"])
        return [
            Carrier(id=c["id"], name=c["nombre"], active=c["activo"])
            for c in carriers
            if include_inactive or c["activo"]
        ]

    # --- Order writes ---------------------------------------------------------

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
        doc = self._load()
        self._check_unique(doc, channel_id, order_code)

        order_id = _new_id()
        now = self._clock().isoformat()
        header = {
            "id": order_id,
            "canal_id": channel_id,
            "codigo_orden": order_code,
            "estado": INITIAL_STATE.value,
            "guia_numero": tracking_number,
            "transportadora_id": carrier_id,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        item_rows = [_item_to_raw(order_id, item) for item in items]

        steps: list[Step] = [
            ("header", ORDERS_TABLE, ChangeKind.INSERT, lambda d: d["orders"].append(header)),
        ]
        if client is not None and not client.is_empty:
            client_row = _client_to_raw(order_id, client)
            steps.append(
                ("client", CLIENTS_TABLE, ChangeKind.INSERT, lambda d: d["clients"].append(client_row))
            )
        if item_rows:
            steps.append(
                ("items", ITEMS_TABLE, ChangeKind.INSERT, lambda d: d["items"].extend(item_rows))
            )

        self._run_steps(doc, "create", order_id, order_code, steps, user)
        return CreatedOrder(order_id=order_id, item_ids=tuple(i["id"] for i in item_rows))

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
        doc = self._load()
        order = self._find_order(doc, order_id)
        self._check_unique(doc, channel_id, order_code, exclude_id=order_id)

        now = self._clock()
        item_rows = [_item_to_raw(order_id, item) for item in items]
        if order["estado"] == OrderState.ELIMINADA.value and state is OrderState.ELIMINADA:
            deleted_at = order.get("deleted_at")
        else:
            deleted_at = _iso(deleted_at_for(state, now))

        def update_header(d: dict) -> None:
            order.update({
                "canal_id": channel_id,
                "codigo_orden": order_code,
                "estado": state.value,
                "guia_numero": tracking_number,
                "transportadora_id": carrier_id,
                "updated_at": now.isoformat(),
                "deleted_at": deleted_at,
            })

        def replace_client(d: dict) -> None:
            d["clients"] = [c for c in d["clients"] if c["orden_id"] != order_id]
            if client is not None and not client.is_empty:
                d["clients"].append(_client_to_raw(order_id, client))

        def replace_items(d: dict) -> None:
            d["items"] = [i for i in d["items"] if i["orden_id"] != order_id] + item_rows

        steps: list[Step] = [
            ("header", ORDERS_TABLE, ChangeKind.UPDATE, update_header),
            ("client", CLIENTS_TABLE, ChangeKind.UPDATE, replace_client),
            ("items", ITEMS_TABLE, ChangeKind.UPDATE, replace_items),
        ]
        self._run_steps(doc, "update", order_id, order_code, steps, user)

    async def soft_delete_order(self, order_id: str, user: str | None = None) -> None:
        await self._set_state(order_id, OrderState.ELIMINADA, "delete", user)

    async def restore_order(self, order_id: str, user: str | None = None) -> None:
        doc = self._load()
        order = self._find_order(doc, order_id)
        if order["estado"] != OrderState.ELIMINADA.value:
            raise ValidationError(f"Order {order['codigo_orden']} is not deleted")
        await self._set_state(order_id, OrderState.RESTAURADA, "restore", user)

    async def delete_item(self, item_id: str) -> str:
        doc = self._load()
        item = next((i for i in doc["items"] if i["id"] == item_id), None)
        if item is None:
            raise EntityNotFoundError("Item not found")

        def remove(d: dict) -> None:
            d["items"] = [i for i in d["items"] if i["id"] != item_id]

        self._apply(doc, "delete item", "items", ITEMS_TABLE, ChangeKind.DELETE, remove)
        return item["orden_id"]

    async def hard_delete_order(self, order_id: str) -> None:
        doc = self._load()
        self._find_order(doc, order_id)

        def remove_items(d: dict) -> None:
            d["items"] = [i for i in d["items"] if i["orden_id"] != order_id]

        def remove_client(d: dict) -> None:
            d["clients"] = [c for c in d["clients"] if c["orden_id"] != order_id]

        def remove_order(d: dict) -> None:
            d["logs"] = [entry for entry in d["logs"] if entry["orden_id"] != order_id]
            d["orders"] = [o for o in d["orders"] if o["id"] != order_id]

        for name, table, mutate in (
            ("items", ITEMS_TABLE, remove_items),
            ("client", CLIENTS_TABLE, remove_client),
            ("header", ORDERS_TABLE, remove_order),
        ):
            self._apply(doc, "remove order", name, table, ChangeKind.DELETE, mutate)

    # --- Catalog writes -------------------------------------------------------

    async def create_carrier(self, name: str) -> Carrier:
        clean = name.strip()
        if not clean:
            raise ValidationError("Carrier name is required")
        doc = self._load()
        now = self._clock().isoformat()
        raw = {"id": _new_id(), "nombre": clean, "activo": True, "created_at": now, "updated_at": now}
        doc["carriers"].append(raw)
        self._persist(doc, "create carrier")
        return Carrier(id=raw["id"], name=clean, active=True)

    def add_channel(self, name: str) -> Channel:
        """Register a sales channel (channels are managed outside the app)."""
        clean = name.strip()
        if not clean:
            raise ValidationError("Channel name is required")
        doc = self._load()
        raw = {"id": _new_id(), "nombre": clean}
        doc["channels"].append(raw)
        self._persist(doc, "create channel")
        return Channel(id=raw["id"], name=clean)

    # --- Write helpers --------------------------------------------------------

    async def _set_state(self, order_id: str, state: OrderState, action: str, user: str | None) -> None:
        doc = self._load()
        order = self._find_order(doc, order_id)
        now = self._clock()

        def update_header(d: dict) -> None:
            order.update({
                "estado": state.value,
                "updated_at": now.isoformat(),
                "deleted_at": _iso(deleted_at_for(state, now)),
            })

        steps: list[Step] = [("header", ORDERS_TABLE, ChangeKind.UPDATE, update_header)]
        self._run_steps(doc, action, order_id, order["codigo_orden"], steps, user)

    def _run_steps(
        self,
        doc: dict,
        action: str,
        order_id: str,
        order_code: str,
        steps: list[Step],
        user: str | None,
    ) -> None:
        for name, table, kind, mutate in steps:
            self._apply(doc, f"{action} order {order_code}", name, table, kind, mutate)

        doc["logs"].append({
            "id": _new_id(),
            "orden_id": order_id,
            "accion": action,
            "usuario": user,
            "created_at": self._clock().isoformat(),
        })
        self._persist(doc, f"{action} order {order_code}: audit log")
        logger.info("%s order %s (%s) by %s", action, order_code, order_id, user or "anonymous")

    def _apply(
        self,
        doc: dict,
        action: str,
        step: str,
        table: str,
        kind: ChangeKind,
        mutate: Callable[[dict], None],
    ) -> None:
        mutate(doc)
        self._persist(doc, f"{action}: step '{step}'")
        if self._change_feed is not None:
            self._change_feed.publish(ChangeEvent(table=table, kind=kind))

    @staticmethod
    def _check_unique(doc: dict, channel_id: str, order_code: str, exclude_id: str | None = None) -> None:
        for order in doc["orders"]:
            if (
                order["canal_id"] == channel_id
                and order["codigo_orden"] == order_code
                and order["id"] != exclude_id
            ):
                raise DuplicateOrderCodeError(
                    f"Order code '{order_code}' already exists in this channel"
                )

    @staticmethod
    def _find_order(doc: dict, order_id: str) -> dict:
        for order in doc["orders"]:
            if order["id"] == order_id:
                return order
        raise EntityNotFoundError("Order not found")

    @staticmethod
    def _view_header(order: dict, doc: dict, carriers: dict[str, str]) -> dict:
        client = next((c for c in doc["clients"] if c["orden_id"] == order["id"]), {})
        return {
            "id": order["id"],
            "codigo_orden": order["codigo_orden"],
            "canal_id": order["canal_id"],
            "estado": order["estado"],
            "cliente_nombre": client.get("nombre"),
            "cliente_documento": client.get("documento"),
            "cliente_ciudad": client.get("ciudad"),
            "cliente_departamento": client.get("departamento"),
            "cliente_correo": client.get("correo"),
            "cliente_celular": client.get("celular"),
            "cliente_direccion": client.get("direccion"),
            "guia_numero": order.get("guia_numero"),
            "transportadora": carriers.get(order.get("transportadora_id") or ""),
            "created_at": order["created_at"],
            "updated_at": order["updated_at"],
            "deleted_at": order.get("deleted_at"),
        }

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> dict:
        try:
            doc = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise BackendError(f"Could not read the order store: {exc}") from exc
        if not isinstance(doc, dict):
            raise BackendError("The order store is corrupt")
        for table in _TABLES:
            doc.setdefault(table, [])
        return doc

    def _persist(self, doc: dict, what: str) -> None:
        try:
            self._file_path.write_text(json.dumps(doc, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise BackendError(f"Could not {what}: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                json.dumps({table: [] for table in _TABLES}, indent=2) + "\n",
                encoding="utf-8",
            )


_EMPTY_ITEM = {
    "item_id": None,
    "sku": None,
    "producto": None,
    "cantidad": None,
    "precio": None,
    "flete": None,
}


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _money(value: Decimal) -> float | int:
    return int(value) if value == value.to_integral_value() else float(value)


def _item_to_raw(order_id: str, item: LineItem) -> dict[str, Any]:
    return {
        "id": item.item_id or _new_id(),
        "orden_id": order_id,
        "sku": item.sku,
        "producto": item.product_name,
        "cantidad": item.quantity,
        "precio": _money(item.unit_price.amount),
        "flete": _money(item.shipping.amount),
    }


def _client_to_raw(order_id: str, client: ClientInfo) -> dict[str, Any]:
    return {
        "orden_id": order_id,
        "nombre": client.name,
        "documento": client.document,
        "ciudad": client.city,
        "departamento": client.department,
        "correo": client.email,
        "celular": client.phone,
        "direccion": client.address,
    }
