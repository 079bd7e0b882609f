"""Data Transfer Objects — plain containers that cross layer boundaries.

Results carry user-facing messages instead of exceptions: remote
failures are recovered at the application boundary so nothing raised by
the backend reaches the presentation layer unhandled.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a single user action against the backend."""

    ok: bool
    message: str
    data: Any = None

    @staticmethod
    def success(message: str, data: Any = None) -> ActionResult:
        return ActionResult(ok=True, message=message, data=data)

    @staticmethod
    def failure(message: str, data: Any = None) -> ActionResult:
        return ActionResult(ok=False, message=message, data=data)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of submitting an edit session."""

    ok: bool
    message: str
    errors: tuple[str, ...] = ()
    order_id: str | None = None


# --- Bulk import -------------------------------------------------------------


@dataclass(frozen=True)
class ImportRow:
    """One pre-parsed spreadsheet row: an item plus its order and client."""

    order_code: str
    sku: str
    quantity: int
    product_name: str = ""
    unit_price: Decimal | None = None
    shipping: Decimal | None = None
    client_name: str = ""
    client_document: str = ""
    client_phone: str = ""
    client_department: str = ""
    client_email: str = ""
    client_address: str = ""


class ImportGroupStatus(Enum):
    NEW = "new"
    EXISTING = "existing"
    REPEATED_SKU = "repeated sku"


@dataclass(frozen=True)
class ImportGroup:
    order_code: str
    rows: tuple[ImportRow, ...]
    status: ImportGroupStatus
    estimated_total: Decimal

    @property
    def client_name(self) -> str:
        return self.rows[0].client_name


@dataclass(frozen=True)
class ImportPreview:
    groups: tuple[ImportGroup, ...]

    @property
    def row_count(self) -> int:
        return sum(len(g.rows) for g in self.groups)

    def with_status(self, status: ImportGroupStatus) -> list[ImportGroup]:
        return [g for g in self.groups if g.status is status]


@dataclass(frozen=True)
class ImportReport:
    created: tuple[str, ...] = ()
    skipped_existing: tuple[str, ...] = ()
    rejected_repeated_sku: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def summary(self) -> str:
        parts = [f"{len(self.created)} created"]
        if self.skipped_existing:
            parts.append(f"{len(self.skipped_existing)} already existing")
        if self.rejected_repeated_sku:
            parts.append(f"{len(self.rejected_repeated_sku)} with repeated SKU")
        return ", ".join(parts)


# --- Export ------------------------------------------------------------------


@dataclass(frozen=True)
class ExportRow:
    order_code: str
    client: str
    product: str
    quantity: int | None
    unit_price: Decimal | None
    shipping: Decimal | None
    state: str
    date: str


EXPORT_HEADERS: tuple[str, ...] = (
    "Código", "Cliente", "Producto", "Cantidad", "Precio", "Flete", "Estado", "Fecha",
)

