"""Column layout and row parsing shared by the CSV and Excel files.

The import template has one row per item.  ``codigo_orden``, ``sku``
and ``cantidad`` are required; an empty ``producto`` falls back to the
SKU; client columns are read from the first row of each order code.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Sequence

from colibri.application.dto import ExportRow, ImportRow
from colibri.domain.exceptions import ValidationError

TEMPLATE_COLUMNS: tuple[str, ...] = (
    "codigo_orden",
    "sku",
    "producto",
    "cantidad",
    "precio",
    "flete",
    "cliente_nombre",
    "cliente_documento",
    "cliente_celular",
    "cliente_departamento",
    "cliente_correo",
    "cliente_direccion",
)

REQUIRED_COLUMNS: tuple[str, ...] = ("codigo_orden", "sku", "cantidad")

TEMPLATE_SAMPLES: tuple[tuple[str, ...], ...] = (
    ("ORD-1001", "SKU-A1", "Producto A", "2", "15000", "5000", "Juan Pérez",
     "123456789", "3001234567", "Cundinamarca", "juan@example.com", "Calle 1 # 2-3"),
    ("ORD-1001", "SKU-B1", "Producto B", "1", "20000", "", "", "", "", "", "", ""),
)

EMPTY_FILE_MESSAGE = "The file is empty"
BAD_HEADER_MESSAGE = "Invalid headers. Use the official template."


def check_header(header: Sequence[str]) -> None:
    if tuple(header) != TEMPLATE_COLUMNS:
        raise ValidationError(BAD_HEADER_MESSAGE)


def pad(cells: Sequence[str]) -> list[str]:
    return list(cells) + [""] * (len(TEMPLATE_COLUMNS) - len(cells))


def parse_row(cells: Sequence[str], where: str) -> ImportRow:
    """Build an ImportRow from trimmed cells; *where* prefixes every error."""
    record = dict(zip(TEMPLATE_COLUMNS, pad(cells)))
    if not record["codigo_orden"]:
        raise ValidationError(f"{where}: codigo_orden is empty")
    if not record["sku"]:
        raise ValidationError(f"{where}: sku is empty")

    try:
        quantity = int(record["cantidad"]) if record["cantidad"] else 0
    except ValueError:
        quantity = 0
    if quantity <= 0:
        raise ValidationError(f"{where}: invalid cantidad")

    return ImportRow(
        order_code=record["codigo_orden"],
        sku=record["sku"],
        product_name=record["producto"] or record["sku"],
        quantity=quantity,
        unit_price=_amount(record["precio"], "precio", where),
        shipping=_amount(record["flete"], "flete", where),
        client_name=record["cliente_nombre"],
        client_document=record["cliente_documento"],
        client_phone=record["cliente_celular"],
        client_department=record["cliente_departamento"],
        client_email=record["cliente_correo"],
        client_address=record["cliente_direccion"],
    )


def _amount(raw: str, column: str, where: str) -> Decimal | None:
    if not raw:
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"{where}: invalid {column}")
    if not value.is_finite() or value < 0:
        raise ValidationError(f"{where}: invalid {column}")
    return value


def export_values(row: ExportRow) -> list[object]:
    """Cell values in EXPORT_HEADERS order; missing item fields are None."""
    return [
        row.order_code,
        row.client,
        row.product,
        row.quantity,
        row.unit_price,
        row.shipping,
        row.state,
        row.date,
    ]
