"""Reference data an order points at: sales channels and carriers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Channel:
    """A sales channel.  Order codes are unique per channel."""

    id: str
    name: str


@dataclass(frozen=True)
class Carrier:
    id: str
    name: str
    active: bool = True
