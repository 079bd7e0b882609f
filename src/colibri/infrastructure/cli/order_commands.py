"""CLI commands for orders."""

from __future__ import annotations

from datetime import datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from colibri.application.bulk_import import REPEATED_FILE_MESSAGE, BulkImportHandler
from colibri.application.delete_item import DeleteItemHandler
from colibri.application.delete_order import DeleteOrderHandler, PurgeOrderHandler
from colibri.application.dto import ActionResult, ImportGroupStatus, ImportRow, SubmitResult
from colibri.application.edit_session import EditSessionReconciler
from colibri.application.export_orders import ExportOrdersHandler
from colibri.application.forms import ItemInput
from colibri.application.restore_order import RestoreOrderHandler
from colibri.domain.exceptions import DomainException
from colibri.domain.model.order import OrderAggregate
from colibri.domain.model.order_state import SELECTABLE_STATES, OrderState
from colibri.domain.service.projection import DateRange, ViewParams
from colibri.infrastructure.bootstrap import Container
from colibri.infrastructure.cli.context import (
    confirmer,
    require_order,
    resolve_channel,
    run,
)
from colibri.infrastructure.spreadsheet import csv_orders, xlsx_orders

_STATE_CHOICES = [s.value for s in OrderState]
_yes_option = click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompts.")


def _parse_item(raw: str) -> ItemInput:
    """Parse 'SKU:Product:Qty[:Price[:Shipping]]' into an ItemInput."""
    parts = [p.strip() for p in raw.split(":")]
    if len(parts) < 3:
        raise click.BadParameter(
            f"Invalid item format '{raw}'. Expected 'SKU:Product:Qty[:Price[:Shipping]]'."
        )
    sku, product, qty_str, *money = parts
    try:
        qty = int(qty_str)
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{qty_str}' for SKU '{sku}'.")
    try:
        price = Decimal(money[0]) if len(money) > 0 and money[0] else Decimal("0")
        shipping = Decimal(money[1]) if len(money) > 1 and money[1] else Decimal("0")
    except InvalidOperation:
        raise click.BadParameter(f"Invalid price or shipping for SKU '{sku}'.")
    return ItemInput(sku=sku, product_name=product, quantity=qty, unit_price=price, shipping=shipping)


def _parse_clock(raw: str | None, end: bool) -> time | None:
    """Parse HH:MM; an end time covers the whole minute."""
    if not raw:
        return None
    try:
        parsed = datetime.strptime(raw, "%H:%M").time()
    except ValueError:
        raise click.BadParameter(f"Invalid time '{raw}'. Expected HH:MM.")
    return parsed.replace(second=59, microsecond=999000) if end else parsed


def _report(result: ActionResult | SubmitResult) -> None:
    if not result.ok:
        details = getattr(result, "errors", ())
        message = result.message + "".join(f"\n  - {e}" for e in details)
        raise click.ClickException(message)
    click.echo(result.message)


def _display_order(order: OrderAggregate, tz: tzinfo) -> None:
    click.echo(f"Order {order.order_code}  (state={order.state.value})")
    click.echo(f"Id:       {order.id}")
    click.echo(f"Client:   {order.client.name or '-'}")
    if order.client.phone or order.client.email:
        click.echo(f"Contact:  {order.client.phone or ''} {order.client.email or ''}".rstrip())
    if order.tracking_number or order.carrier:
        click.echo(f"Shipment: {order.carrier or '-'} {order.tracking_number or ''}".rstrip())
    click.echo(f"Created:  {order.created_at.astimezone(tz):%Y-%m-%d %H:%M}")
    if order.deleted_at:
        click.echo(f"Deleted:  {order.deleted_at.astimezone(tz):%Y-%m-%d %H:%M}")
    click.echo()
    click.echo(f"  {'SKU':<12} {'Product':<24} {'Qty':>5} {'Price':>14} {'Shipping':>12}  {'Item id'}")
    click.echo(f"  {'-'*71}")
    for item in order.items:
        click.echo(
            f"  {item.sku or '':<12} {item.product_name:<24} {item.quantity:>5} "
            f"{str(item.unit_price):>14} {str(item.shipping):>12}  {item.item_id or ''}"
        )
    click.echo(f"  {'-'*71}")
    click.echo(f"  {'Order Total':<44} {str(order.total):>27}")


@click.command("list")
@click.option("--state", type=click.Choice(_STATE_CHOICES + ["all"]), default="all", help="Lifecycle state filter.")
@click.option("--search", default="", help="Text to look for in code, client, product or SKU.")
@click.option("--from", "date_from", type=click.DateTime(["%Y-%m-%d"]), default=None, help="First day (YYYY-MM-DD).")
@click.option("--to", "date_to", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Last day (YYYY-MM-DD).")
@click.option("--start-time", default=None, help="Clock time on the first day (HH:MM).")
@click.option("--end-time", default=None, help="Clock time on the last day (HH:MM).")
@click.option("--include-deleted", is_flag=True, default=False, help="Show deleted orders too.")
@click.option("--desc", is_flag=True, default=False, help="Newest first.")
@click.option("--page", default=1, type=int, help="Page number.")
@click.option("--page-size", default=20, type=int, help="Orders per page.")
def order_list(
    state: str,
    search: str,
    date_from: datetime | None,
    date_to: datetime | None,
    start_time: str | None,
    end_time: str | None,
    include_deleted: bool,
    desc: bool,
    page: int,
    page_size: int,
) -> None:
    """List orders with filters, newest or oldest first."""
    date_range = None
    if date_from or date_to:
        first = (date_from or date_to).date()  # type: ignore[union-attr]
        last = (date_to or date_from).date()  # type: ignore[union-attr]
        date_range = DateRange(
            start=first,
            end=last,
            start_time=_parse_clock(start_time, end=False),
            end_time=_parse_clock(end_time, end=True),
        )
    params = ViewParams(
        include_deleted=include_deleted,
        search=search,
        state=None if state == "all" else OrderState(state),
        date_range=date_range,
        descending=desc,
    )

    async def action(c: Container) -> None:
        counts = c.live_view.state_counts(include_deleted)
        badges = "  ".join(f"{s.value}: {counts[s]}" for s in OrderState if counts.get(s))
        click.echo(badges or "No orders.")
        window = c.live_view.page(params, page, page_size)
        click.echo()
        click.echo(f"  {'Code':<14} {'Client':<24} {'Items':>5} {'State':<14} {'Created':<16} {'Total':>14}")
        click.echo(f"  {'-'*92}")
        for order in window.items:
            created = order.created_at.astimezone(c.tz)
            click.echo(
                f"  {order.order_code:<14} {(order.client.name or '-')[:24]:<24} {len(order.items):>5} "
                f"{order.state.value:<14} {created:%Y-%m-%d %H:%M} {str(order.total):>14}"
            )
        click.echo(f"  {'-'*92}")
        click.echo(f"  Page {window.number}/{window.pages}  ({window.total} orders)")

    run(action)


@click.command("show")
@click.option("--code", required=True, help="Order code to display.")
def order_show(code: str) -> None:
    """Show details of an existing order."""

    async def action(c: Container) -> None:
        _display_order(require_order(c, code), c.tz)

    run(action)


@click.command("create")
@click.option("--channel", required=True, help="Sales channel id or name.")
@click.option("--code", required=True, help="Order code (unique per channel).")
@click.option("--client", "client_name", required=True, help="Client name.")
@click.option("--document", default="", help="Client document id.")
@click.option("--city", default="", help="Client city.")
@click.option("--department", default="", help="Client department.")
@click.option("--email", default="", help="Client email.")
@click.option("--phone", default="", help="Client phone (digits only).")
@click.option("--address", default="", help="Client address.")
@click.option("--item", "items", multiple=True, required=True, help="Item as 'SKU:Product:Qty[:Price[:Shipping]]'; repeatable.")
@click.option("--tracking", default="", help="Shipment tracking number.")
@click.option("--carrier", default="", help="Carrier name.")
@_yes_option
def order_create(
    channel: str,
    code: str,
    client_name: str,
    document: str,
    city: str,
    department: str,
    email: str,
    phone: str,
    address: str,
    items: tuple[str, ...],
    tracking: str,
    carrier: str,
    yes: bool,
) -> None:
    """Create a new order."""
    parsed = [_parse_item(raw) for raw in items]

    async def action(c: Container) -> None:
        resolved = await resolve_channel(c, channel)
        carrier_id = ""
        if carrier:
            carriers = await c.gateway.list_carriers()
            carrier_id = next((x.id for x in carriers if x.name == carrier), "")
            if not carrier_id:
                raise click.ClickException(f"Unknown carrier '{carrier}'")

        session = EditSessionReconciler(c.gateway, c.live_view, confirmer(yes), user=c.settings.user)
        session.open()
        primary, *extras = parsed
        session.edit(
            channel_id=resolved.id,
            order_code=code,
            sku=primary.sku,
            product_name=primary.product_name,
            quantity=primary.quantity,
            unit_price=primary.unit_price,
            shipping=primary.shipping,
            tracking_number=tracking,
            carrier_id=carrier_id,
        )
        session.edit_client(
            name=client_name, document=document, city=city, department=department,
            email=email, phone=phone, address=address,
        )
        for extra in extras:
            session.add_extra_item(extra)

        result = await session.submit()
        session.close(force_discard=True)
        _report(result)

    run(action)


@click.command("set-state")
@click.option("--code", required=True, help="Order code.")
@click.option("--state", required=True, type=click.Choice([s.value for s in SELECTABLE_STATES]), help="New state.")
@_yes_option
def order_set_state(code: str, state: str, yes: bool) -> None:
    """Move an order to another lifecycle state."""

    async def action(c: Container) -> None:
        order = require_order(c, code)
        carriers = await c.gateway.list_carriers(include_inactive=True)
        session = EditSessionReconciler(c.gateway, c.live_view, confirmer(yes), user=c.settings.user)
        session.open(order, carriers)
        session.edit(state=OrderState(state))
        result = await session.submit()
        session.close(force_discard=True)
        _report(result)

    run(action)


@click.command("delete")
@click.option("--code", required=True, help="Order code to delete.")
@_yes_option
def order_delete(code: str, yes: bool) -> None:
    """Soft-delete an order (it can be restored)."""

    async def action(c: Container) -> None:
        order = require_order(c, code)
        handler = DeleteOrderHandler(c.gateway, c.live_view, confirmer(yes), user=c.settings.user)
        _report(await handler.handle(order.id))

    run(action)


@click.command("restore")
@click.option("--code", required=True, help="Order code to restore.")
def order_restore(code: str) -> None:
    """Restore a deleted order."""

    async def action(c: Container) -> None:
        order = require_order(c, code)
        handler = RestoreOrderHandler(c.gateway, c.live_view, user=c.settings.user)
        _report(await handler.handle(order.id))

    run(action)


@click.command("purge")
@click.option("--code", required=True, help="Order code to remove permanently.")
@_yes_option
def order_purge(code: str, yes: bool) -> None:
    """Remove an order and all of its items permanently."""

    async def action(c: Container) -> None:
        order = require_order(c, code)
        handler = PurgeOrderHandler(c.gateway, c.live_view, confirmer(yes))
        _report(await handler.handle(order.id))

    run(action)


@click.command("delete-item")
@click.option("--item-id", required=True, help="Id of the line item.")
@_yes_option
def order_delete_item(item_id: str, yes: bool) -> None:
    """Delete a single line item from its order."""

    async def action(c: Container) -> None:
        handler = DeleteItemHandler(c.gateway, c.live_view, confirmer(yes))
        _report(await handler.handle(item_id))

    run(action)


def _is_excel(file: Path) -> bool:
    return file.suffix.lower() == ".xlsx"


def _read_rows(file: Path) -> list[ImportRow]:
    if _is_excel(file):
        return xlsx_orders.read_import_rows(file)
    return csv_orders.read_import_rows(file.read_text(encoding="utf-8"))


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--channel", required=True, help="Sales channel id or name.")
@_yes_option
def order_import(file: Path, channel: str, yes: bool) -> None:
    """Create orders in bulk from an .xlsx workbook or a semicolon-separated file."""
    try:
        rows = _read_rows(file)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    async def action(c: Container) -> None:
        resolved = await resolve_channel(c, channel)
        handler = BulkImportHandler(
            c.gateway, c.live_view, user=c.settings.user, last_digest=c.import_digest.load(),
        )
        if handler.is_repeat(rows):
            raise click.ClickException(REPEATED_FILE_MESSAGE)
        preview = await handler.preview(rows)
        click.echo(f"Orders detected: {len(preview.groups)}  items: {preview.row_count}")
        for group in preview.groups:
            click.echo(
                f"  {group.order_code:<14} {(group.client_name or '-')[:24]:<24} "
                f"{len(group.rows):>3} items  ${group.estimated_total:,.2f}  {group.status.value}"
            )
        if not preview.with_status(ImportGroupStatus.NEW):
            raise click.ClickException("Nothing to import")
        if not confirmer(yes)(f"Create {len(preview.with_status(ImportGroupStatus.NEW))} orders?"):
            raise click.ClickException("Import cancelled")

        report = await handler.handle(resolved.id, rows)
        c.import_digest.save(handler.last_digest)
        if not report.ok:
            raise click.ClickException(f"{report.error} ({report.summary})")
        click.echo(f"Import finished: {report.summary}")

    run(action)


@click.command("template")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
def order_template(file: Path) -> None:
    """Write an import template with sample rows (.xlsx or semicolon-separated)."""
    if _is_excel(file):
        xlsx_orders.write_template(file)
    else:
        with file.open("w", encoding="utf-8", newline="") as out:
            csv_orders.write_template(out)
    click.echo(f"Template written to {file}")


@click.command("export")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--include-deleted", is_flag=True, default=False, help="Export deleted orders too.")
def order_export(file: Path, include_deleted: bool) -> None:
    """Export orders, one row per item, to .xlsx or a semicolon-separated file."""

    async def action(c: Container) -> None:
        orders = c.live_view.project(ViewParams(include_deleted=include_deleted))
        rows = ExportOrdersHandler(c.tz).handle(orders)
        if _is_excel(file):
            count = xlsx_orders.write_export(rows, file)
        else:
            with file.open("w", encoding="utf-8", newline="") as out:
                count = csv_orders.write_export(rows, out)
        click.echo(f"{count} rows written to {file}")

    run(action)
