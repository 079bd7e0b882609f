"""FlatRow — one denormalized record of the backend order view.

The view joins orders with their client and line items, so an order
with N items arrives as N rows that repeat the header fields, and an
order without items arrives as a single row whose item fields are null.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping

from colibri.domain.exceptions import ValidationError
from colibri.domain.model.order import ClientInfo
from colibri.domain.model.order_state import OrderState


@dataclass(frozen=True)
class FlatRow:

    order_id: str
    order_code: str
    channel_id: str | None
    state: OrderState
    created_at: datetime
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    client: ClientInfo = field(default_factory=ClientInfo)
    tracking_number: str | None = None
    carrier: str | None = None
    # --- item fields (all null for an order without items) ---
    item_id: str | None = None
    sku: str | None = None
    product_name: str | None = None
    quantity: int | None = None
    unit_price: Any = None
    shipping: Any = None

    @property
    def has_item(self) -> bool:
        return bool(self.sku or self.product_name)

    # --- Parsing --------------------------------------------------------------

    @staticmethod
    def from_record(raw: Mapping[str, Any], default_tz: tzinfo = timezone.utc) -> FlatRow:
        """Build a row from a view record keyed by the backend column names."""
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Order row must be a mapping, got {type(raw).__name__}")
        if raw.get("id") in (None, ""):
            raise ValidationError("Order row is missing its id")

        created_at = parse_timestamp(raw.get("created_at"), default_tz)
        if created_at is None:
            raise ValidationError(f"Order row {raw['id']} is missing created_at")

        return FlatRow(
            order_id=str(raw["id"]),
            order_code=raw.get("codigo_orden") or "",
            channel_id=_opt_str(raw.get("canal_id")),
            state=OrderState.parse(raw.get("estado") or OrderState.NUEVA_ORDEN),
            created_at=created_at,
            updated_at=parse_timestamp(raw.get("updated_at"), default_tz),
            deleted_at=parse_timestamp(raw.get("deleted_at"), default_tz),
            client=ClientInfo(
                name=raw.get("cliente_nombre"),
                document=raw.get("cliente_documento"),
                city=raw.get("cliente_ciudad"),
                department=raw.get("cliente_departamento"),
                email=raw.get("cliente_correo"),
                phone=_opt_str(raw.get("cliente_celular")),
                address=raw.get("cliente_direccion"),
            ),
            tracking_number=raw.get("guia_numero"),
            carrier=raw.get("transportadora"),
            item_id=_opt_str(raw.get("item_id")),
            sku=raw.get("sku"),
            product_name=raw.get("producto"),
            quantity=_opt_int(raw.get("cantidad")),
            unit_price=raw.get("precio"),
            shipping=raw.get("flete"),
        )


def parse_timestamp(value: Any, default_tz: tzinfo = timezone.utc) -> datetime | None:
    """Parse an ISO timestamp into an aware datetime.

    Values without an offset are local times in *default_tz*.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _opt_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid quantity: {value!r}") from exc
