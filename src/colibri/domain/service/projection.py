"""Domain service: the derived order projection shown to the user.

Everything here is a pure function of (orders, view parameters); the
projection is recomputed from scratch on every parameter change.

Pipeline, applied in order:

  1. visibility: drop ``eliminada`` orders unless deleted are included
  2. date range: inclusive window on the creation timestamp
  3. search: trimmed, case-insensitive substring match
  4. state: keep a single lifecycle state
  5. sort: ascending creation time, reversed when descending
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from typing import Iterable, Sequence

from colibri.domain.exceptions import ValidationError
from colibri.domain.model.order import OrderAggregate
from colibri.domain.model.order_state import OrderState

START_OF_DAY = time(0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateRange:
    """Inclusive day range with independently settable clock times."""

    start: date
    end: date
    start_time: time | None = None
    end_time: time | None = None

    def bounds(self, tz: tzinfo) -> tuple[datetime, datetime]:
        lower = datetime.combine(self.start, self.start_time or START_OF_DAY, tzinfo=tz)
        upper = datetime.combine(self.end, self.end_time or END_OF_DAY, tzinfo=tz)
        return lower, upper


@dataclass(frozen=True)
class ViewParams:
    include_deleted: bool = False
    search: str = ""
    state: OrderState | None = None  # None means "all"
    date_range: DateRange | None = None
    descending: bool = False


@dataclass(frozen=True)
class Page:
    """A window over a projection.  ``number`` is 1-based."""

    items: tuple[OrderAggregate, ...]
    number: int
    size: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.size))

    @property
    def has_next(self) -> bool:
        return self.number < self.pages

    @property
    def has_previous(self) -> bool:
        return self.number > 1


# --- Pipeline steps -----------------------------------------------------------


def visible(orders: Iterable[OrderAggregate], include_deleted: bool) -> list[OrderAggregate]:
    if include_deleted:
        return list(orders)
    return [o for o in orders if not o.is_deleted]


def within(orders: Iterable[OrderAggregate], date_range: DateRange, tz: tzinfo) -> list[OrderAggregate]:
    lower, upper = date_range.bounds(tz)
    return [o for o in orders if lower <= o.created_at <= upper]


def matching(orders: Iterable[OrderAggregate], search: str) -> list[OrderAggregate]:
    needle = search.strip().lower()
    if not needle:
        return list(orders)
    return [o for o in orders if _matches(o, needle)]


def _matches(order: OrderAggregate, needle: str) -> bool:
    if needle in (order.order_code or "").lower():
        return True
    if needle in (order.client.name or "").lower():
        return True
    return any(
        needle in item.product_name.lower() or needle in (item.sku or "").lower()
        for item in order.items
    )


# --- Public API ---------------------------------------------------------------


def project(
    orders: Iterable[OrderAggregate],
    params: ViewParams,
    tz: tzinfo = timezone.utc,
) -> list[OrderAggregate]:
    """Apply the full filter/sort pipeline to *orders*."""
    result = visible(orders, params.include_deleted)
    if params.date_range is not None:
        result = within(result, params.date_range, tz)
    if params.search.strip():
        result = matching(result, params.search)
    if params.state is not None:
        result = [o for o in result if o.state is params.state]

    result.sort(key=lambda o: o.created_at)
    if params.descending:
        result.reverse()
    return result


def count_by_state(
    orders: Iterable[OrderAggregate],
    include_deleted: bool = False,
) -> dict[OrderState, int]:
    """Per-state counts over the visibility-filtered collection only."""
    counts: dict[OrderState, int] = {}
    for order in visible(orders, include_deleted):
        counts[order.state] = counts.get(order.state, 0) + 1
    return counts


def paginate(orders: Sequence[OrderAggregate], number: int, size: int) -> Page:
    """Cut a 1-based page out of *orders*, clamping *number* into range."""
    if size <= 0:
        raise ValidationError("Page size must be positive")
    total = len(orders)
    pages = max(1, math.ceil(total / size))
    number = min(max(1, number), pages)
    start = (number - 1) * size
    return Page(items=tuple(orders[start:start + size]), number=number, size=size, total=total)
