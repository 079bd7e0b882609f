"""Application service: Bulk Import use case.

Takes item rows already parsed from a spreadsheet and creates one order
per order code.  Rows are grouped by code in first-seen order.  A group
whose code already exists is skipped; a group that repeats an SKU is
rejected.  Creation stops at the first backend failure, which is
reported together with what was created before it.

The handler remembers a digest of the last file it imported and refuses
the same content twice in a row.  Front ends that build a handler per
run pass the previous digest in and persist ``last_digest`` afterwards.
"""

from __future__ import annotations

import hashlib
import json
import logging
from decimal import Decimal
from typing import Iterable

from colibri.application.dto import (
    ImportGroup,
    ImportGroupStatus,
    ImportPreview,
    ImportReport,
    ImportRow,
)
from colibri.application.live_view import LiveViewController
from colibri.domain.exceptions import DomainException, DuplicateOrderCodeError
from colibri.domain.model.order import ClientInfo, LineItem
from colibri.domain.model.value_objects import Money
from colibri.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)

REPEATED_FILE_MESSAGE = "This file was already imported. Change its content or pick another file."


def group_rows(rows: Iterable[ImportRow]) -> dict[str, list[ImportRow]]:
    groups: dict[str, list[ImportRow]] = {}
    for row in rows:
        groups.setdefault(row.order_code, []).append(row)
    return groups


def has_repeated_sku(rows: list[ImportRow]) -> bool:
    skus = [row.sku for row in rows]
    return len(skus) != len(set(skus))


def estimated_total(rows: list[ImportRow]) -> Decimal:
    total = Decimal("0")
    for row in rows:
        total += (row.unit_price or Decimal("0")) * row.quantity + (row.shipping or Decimal("0"))
    return total


class BulkImportHandler:

    def __init__(
        self,
        gateway: OrderGateway,
        live_view: LiveViewController | None = None,
        user: str | None = None,
        last_digest: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._live_view = live_view
        self._user = user
        self._last_digest = last_digest

    @property
    def last_digest(self) -> str | None:
        """Digest of the last file this handler imported, or the one it was given."""
        return self._last_digest

    def is_repeat(self, rows: list[ImportRow]) -> bool:
        return bool(rows) and _digest(rows) == self._last_digest

    async def preview(self, rows: list[ImportRow]) -> ImportPreview:
        existing = await self._gateway.list_order_codes()
        groups = []
        for code, group in group_rows(rows).items():
            if code in existing:
                status = ImportGroupStatus.EXISTING
            elif has_repeated_sku(group):
                status = ImportGroupStatus.REPEATED_SKU
            else:
                status = ImportGroupStatus.NEW
            groups.append(
                ImportGroup(
                    order_code=code,
                    rows=tuple(group),
                    status=status,
                    estimated_total=estimated_total(group),
                )
            )
        return ImportPreview(groups=tuple(groups))

    async def handle(self, channel_id: str, rows: list[ImportRow]) -> ImportReport:
        if not channel_id:
            return ImportReport(error="A sales channel must be selected")
        if not rows:
            return ImportReport(error="The file has no rows")

        digest = _digest(rows)
        if digest == self._last_digest:
            return ImportReport(error=REPEATED_FILE_MESSAGE)

        try:
            preview = await self.preview(rows)
        except DomainException as exc:
            return ImportReport(error=str(exc))

        created: list[str] = []
        skipped = [g.order_code for g in preview.with_status(ImportGroupStatus.EXISTING)]
        rejected = [g.order_code for g in preview.with_status(ImportGroupStatus.REPEATED_SKU)]
        error: str | None = None

        for group in preview.with_status(ImportGroupStatus.NEW):
            try:
                await self._gateway.create_order(
                    channel_id=channel_id,
                    order_code=group.order_code,
                    client=_client_of(group.rows[0]),
                    items=[_line_item_of(row) for row in group.rows],
                    user=self._user,
                )
            except DuplicateOrderCodeError:
                logger.info("Order %s appeared during import, skipping", group.order_code)
                skipped.append(group.order_code)
                continue
            except DomainException as exc:
                error = f"Error importing order {group.order_code}: {exc}"
                logger.warning(error)
                break
            created.append(group.order_code)

        self._last_digest = digest
        report = ImportReport(
            created=tuple(created),
            skipped_existing=tuple(skipped),
            rejected_repeated_sku=tuple(rejected),
            error=error,
        )
        logger.info("Import finished: %s", report.summary)
        if self._live_view is not None:
            await self._live_view.refresh()
        return report


def _client_of(row: ImportRow) -> ClientInfo | None:
    if not (row.client_name or row.client_document or row.client_phone):
        return None
    return ClientInfo(
        name=row.client_name or None,
        document=row.client_document or None,
        department=row.client_department or None,
        email=row.client_email or None,
        phone=row.client_phone or None,
        address=row.client_address or None,
    )


def _line_item_of(row: ImportRow) -> LineItem:
    return LineItem(
        sku=row.sku,
        product_name=row.product_name or row.sku,
        quantity=row.quantity,
        unit_price=Money.of(row.unit_price),
        shipping=Money.of(row.shipping),
    )


def _digest(rows: list[ImportRow]) -> str:
    payload = json.dumps([_row_key(r) for r in rows], default=str, sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _row_key(row: ImportRow) -> dict:
    return {
        "order_code": row.order_code,
        "sku": row.sku,
        "product_name": row.product_name,
        "quantity": row.quantity,
        "unit_price": row.unit_price,
        "shipping": row.shipping,
        "client": [
            row.client_name, row.client_document, row.client_phone,
            row.client_department, row.client_email, row.client_address,
        ],
    }
