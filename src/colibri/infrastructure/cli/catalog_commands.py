"""CLI commands for sales channels and carriers."""

from __future__ import annotations

import click

from colibri.application.catalogs import (
    CreateCarrierHandler,
    ListCarriersHandler,
    ListChannelsHandler,
)
from colibri.domain.exceptions import DomainException
from colibri.infrastructure.bootstrap import Container, build
from colibri.infrastructure.cli.context import run


@click.command("list")
def channel_list() -> None:
    """List sales channels."""

    async def action(c: Container) -> None:
        result = await ListChannelsHandler(c.gateway).handle()
        if not result.ok:
            raise click.ClickException(result.message)
        if not result.data:
            click.echo("No channels found.")
            return
        click.echo(f"{'ID':<38} {'Name':<24}")
        click.echo("-" * 62)
        for channel in result.data:
            click.echo(f"{channel.id:<38} {channel.name:<24}")

    run(action)


@click.command("add")
@click.option("--name", required=True, help="Channel name.")
def channel_add(name: str) -> None:
    """Register a new sales channel."""
    gateway = build().gateway

    try:
        channel = gateway.add_channel(name)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Channel '{channel.name}' added with id {channel.id}")


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, default=False, help="Include inactive carriers.")
def carrier_list(include_inactive: bool) -> None:
    """List carriers."""

    async def action(c: Container) -> None:
        result = await ListCarriersHandler(c.gateway).handle(include_inactive)
        if not result.ok:
            raise click.ClickException(result.message)
        if not result.data:
            click.echo("No carriers found.")
            return
        click.echo(f"{'ID':<38} {'Name':<24} {'Active':<6}")
        click.echo("-" * 70)
        for carrier in result.data:
            click.echo(f"{carrier.id:<38} {carrier.name:<24} {'yes' if carrier.active else 'no':<6}")

    run(action)


@click.command("add")
@click.option("--name", required=True, help="Carrier name.")
def carrier_add(name: str) -> None:
    """Create a carrier."""

    async def action(c: Container) -> None:
        result = await CreateCarrierHandler(c.gateway).handle(name)
        if not result.ok:
            raise click.ClickException(result.message)
        click.echo(result.message)

    run(action)
