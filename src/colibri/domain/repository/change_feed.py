"""Abstract realtime change feed.

Subscribers learn *that* a table changed, never *what* changed: every
event is only a signal to fetch the view again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class ChangeKind(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


ORDERS_TABLE = "ordenes"
ITEMS_TABLE = "orden_items"
CLIENTS_TABLE = "orden_clientes"

# The three tables behind the order view.
ORDER_TABLES: tuple[str, ...] = (ORDERS_TABLE, ITEMS_TABLE, CLIENTS_TABLE)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind


ChangeHandler = Callable[[ChangeEvent], None]


class Subscription(ABC):

    @abstractmethod
    def cancel(self) -> None:
        """Stop delivering events.  Calling it twice is harmless."""


class ChangeFeed(ABC):

    @abstractmethod
    def subscribe(self, table: str, handler: ChangeHandler) -> Subscription:
        """Call *handler* for every insert, update or delete on *table*."""
