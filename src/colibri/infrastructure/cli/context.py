"""Shared plumbing for CLI commands: event loop, container, confirmations."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import click

from colibri.application.edit_session import Confirm
from colibri.domain.exceptions import DomainException
from colibri.domain.model.catalog import Channel
from colibri.domain.model.order import OrderAggregate
from colibri.infrastructure.bootstrap import Container, build

T = TypeVar("T")


def run(action: Callable[[Container], Awaitable[T]]) -> T:
    """Build the container, start the live view, run *action*, tear down."""

    async def main() -> T:
        container = build()
        await container.live_view.start()
        try:
            if container.live_view.error:
                raise click.ClickException(f"Could not load orders: {container.live_view.error}")
            return await action(container)
        finally:
            container.live_view.dispose()

    try:
        return asyncio.run(main())
    except DomainException as exc:
        raise click.ClickException(str(exc))


def confirmer(assume_yes: bool) -> Confirm:
    def confirm(prompt: str) -> bool:
        return assume_yes or click.confirm(prompt, default=False)

    return confirm


def require_order(container: Container, code: str) -> OrderAggregate:
    order = container.live_view.find_by_code(code)
    if order is None:
        raise click.ClickException(f"Order '{code}' not found")
    return order


async def resolve_channel(container: Container, value: str) -> Channel:
    channels = await container.gateway.list_channels()
    for channel in channels:
        if value in (channel.id, channel.name):
            return channel
    raise click.ClickException(f"Unknown channel '{value}'")
