"""Order lifecycle states.

The states form a labeled set, not a strict transition table: users may
move an order from any state to any other state, with two guarded
exceptions.  ``eliminada`` is entered only through the delete operation
and left only through the restore operation, which lands on
``restaurada`` rather than the previous forward-flow state.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from colibri.domain.exceptions import ValidationError


class OrderState(Enum):
    NUEVA_ORDEN = "nueva orden"
    POR_ALISTAR = "por alistar"
    POR_EMPACAR = "por empacar"
    POR_DESPACHAR = "por despachar"
    POR_FACTURAR = "por facturar"
    CANCELADA = "cancelada"
    ELIMINADA = "eliminada"
    RESTAURADA = "restaurada"

    @staticmethod
    def parse(value: str | OrderState) -> OrderState:
        if isinstance(value, OrderState):
            return value
        try:
            return OrderState(str(value).strip().lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown order state: {value!r}") from exc


FORWARD_FLOW: tuple[OrderState, ...] = (
    OrderState.NUEVA_ORDEN,
    OrderState.POR_ALISTAR,
    OrderState.POR_EMPACAR,
    OrderState.POR_DESPACHAR,
    OrderState.POR_FACTURAR,
)

# States a user can pick directly in the edit form.
SELECTABLE_STATES: tuple[OrderState, ...] = tuple(
    s for s in OrderState if s is not OrderState.ELIMINADA
)

INITIAL_STATE = OrderState.NUEVA_ORDEN


def check_direct_transition(current: OrderState | None, target: OrderState) -> None:
    """Reject direct edits that would bypass the delete/restore operations.

    ``current`` is None for orders that do not exist yet.
    """
    if current is target:
        return
    if target is OrderState.ELIMINADA:
        raise ValidationError(
            "An order can only become 'eliminada' through the delete operation"
        )
    if current is OrderState.ELIMINADA:
        raise ValidationError(
            "A deleted order can only leave 'eliminada' through the restore operation"
        )


def deleted_at_for(state: OrderState, now: datetime) -> datetime | None:
    """Soft-delete timestamp that goes with *state*."""
    return now if state is OrderState.ELIMINADA else None
