import click

from colibri.infrastructure.bootstrap import configure_logging
from colibri.infrastructure.cli.catalog_commands import (
    carrier_add,
    carrier_list,
    channel_add,
    channel_list,
)
from colibri.infrastructure.cli.order_commands import (
    order_create,
    order_delete,
    order_delete_item,
    order_export,
    order_import,
    order_list,
    order_purge,
    order_restore,
    order_set_state,
    order_show,
    order_template,
)
from colibri.infrastructure.config import Settings


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output.")
def cli(verbose: bool) -> None:
    """Colibrí — order administration for ADF"""
    configure_logging("DEBUG" if verbose else Settings.from_env().log_level)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def channel() -> None:
    """Manage sales channels."""


@cli.group()
def carrier() -> None:
    """Manage carriers."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_delete_item)
order.add_command(order_export)
order.add_command(order_import)
order.add_command(order_list)
order.add_command(order_purge)
order.add_command(order_restore)
order.add_command(order_set_state)
order.add_command(order_show)
order.add_command(order_template)
channel.add_command(channel_add)
channel.add_command(channel_list)
carrier.add_command(carrier_add)
carrier.add_command(carrier_list)
