"""CLI entry point for cart-manager.

Invoked as::

    cartmanager [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m cartmanager.cli.main

Commands
--------
version     Show version information
drivers     List registered storage drivers
config      Show the resolved configuration of a config file or one cart
key         Print the storage key of a cart
show        Restore a cart from storage and print its state
clear       Clear the persisted state of a cart
"""
from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from cartmanager.manager import CartManager

console = Console()
err_console = Console(stderr=True)


def _load_or_exit(path: str) -> dict[str, Any]:
    """Load a configuration file, exiting on error."""
    from cartmanager.config import load_config
    from cartmanager.errors import ConfigurationError

    try:
        return load_config(path)
    except ConfigurationError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def _manager_or_exit(path: str) -> "CartManager":
    """Build a manager from a configuration file, exiting on error."""
    from cartmanager.errors import CartManagerError
    from cartmanager.manager import CartManager
    from cartmanager.storage import default_registry

    config = _load_or_exit(path)
    default_registry.load_entrypoints()
    try:
        return CartManager(config)
    except CartManagerError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


def _render(data: Any, output_format: str) -> None:
    if output_format == "yaml":
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    else:
        text = json.dumps(data, indent=2)
    console.print(Syntax(text, output_format))


_FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Output format",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="cart-manager")
def cli() -> None:
    """Manage named cart instances and their persisted state."""


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from cartmanager import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]cart-manager[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# drivers command
# ---------------------------------------------------------------------------


@cli.command(name="drivers")
def drivers_command() -> None:
    """List storage drivers, including those installed via entry-points."""
    from cartmanager.storage import default_registry

    default_registry.load_entrypoints()

    table = Table(title="Storage drivers")
    table.add_column("Name", style="bold")
    table.add_column("Class")
    for name in default_registry.list_drivers():
        cls = default_registry.get(name)
        table.add_row(name, f"{cls.__module__}.{cls.__qualname__}")
    console.print(table)


# ---------------------------------------------------------------------------
# config command
# ---------------------------------------------------------------------------


@cli.command(name="config")
@click.argument("file", type=click.Path(exists=False))
@click.argument("cart_id", required=False)
@_FORMAT_OPTION
def config_command(file: str, cart_id: str | None, output_format: str) -> None:
    """Show resolved configuration.

    FILE is the path to a YAML or JSON configuration file. With CART_ID,
    only that cart's configuration is shown (``defaults`` for a cart
    that is not declared).
    """
    from cartmanager.config import ManagerConfig

    tree = ManagerConfig.from_mapping(_load_or_exit(file))
    if cart_id is None:
        data = {
            "defaults": tree.defaults,
            "carts": {cid: tree.resolve(cid) for cid in tree.carts},
        }
    elif cart_id in tree.carts:
        data = tree.resolve(cart_id)
    else:
        data = tree.defaults
    _render(data, output_format.lower())


# ---------------------------------------------------------------------------
# key command
# ---------------------------------------------------------------------------


@cli.command(name="key")
@click.argument("file", type=click.Path(exists=False))
@click.argument("cart_id")
def key_command(file: str, cart_id: str) -> None:
    """Print the storage key of CART_ID under the configuration in FILE."""
    manager = _manager_or_exit(file)
    click.echo(manager.get_storage_key(cart_id))


# ---------------------------------------------------------------------------
# show command
# ---------------------------------------------------------------------------


@cli.command(name="show")
@click.argument("file", type=click.Path(exists=False))
@click.argument("cart_id", required=False)
@_FORMAT_OPTION
def show_command(file: str, cart_id: str | None, output_format: str) -> None:
    """Restore a cart from its storage and print its state.

    FILE is the configuration file; CART_ID defaults to the first
    declared cart. An undeclared CART_ID is created with the defaults.
    """
    from cartmanager.errors import CartManagerError

    manager = _manager_or_exit(file)
    try:
        if cart_id and not manager.cart_instance_available(cart_id):
            manager.new_cart_instance(cart_id)
        cart = manager.get_cart_instance(cart_id)
    except CartManagerError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    console.print(f"[bold]Cart[/bold] {cart.cart_id} [dim](key: {manager.get_storage_key(cart.cart_id)})[/dim]")
    _render(cart.export_state(), output_format.lower())


# ---------------------------------------------------------------------------
# clear command
# ---------------------------------------------------------------------------


@cli.command(name="clear")
@click.argument("file", type=click.Path(exists=False))
@click.argument("cart_id")
def clear_command(file: str, cart_id: str) -> None:
    """Clear the persisted state of CART_ID."""
    from cartmanager.errors import CartManagerError

    manager = _manager_or_exit(file)
    try:
        manager.clear_state(cart_id)
    except CartManagerError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    console.print(f"[green]Cleared[/green] {manager.get_storage_key(cart_id)}")


if __name__ == "__main__":
    cli()
