"""Stockroom command line."""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

import click
import psycopg

from inventory_data import (
    CustomFieldService,
    DirectBackend,
    InventoryDataError,
    InventorySeeder,
    InventoryService,
    ItemService,
    MalformedFormatError,
    get_backend,
)
from inventory_data.backends import Backend
from stockroom.config import CONFIG_FILENAME, Config


def _load_config(config_path: str | None) -> Config:
    try:
        if config_path:
            return Config.from_toml(config_path)
        return Config.find_and_load()
    except FileNotFoundError:
        if config_path:
            raise
        return Config()


@contextmanager
def _open_backend(config: Config) -> Iterator[Backend]:
    if config.database.backend != "direct":
        yield get_backend(config.database.backend)
        return

    with psycopg.connect(config.database.url, autocommit=True) as conn:
        yield get_backend("direct", conn, config.database.schema_name)


@click.group()
@click.version_option(package_name="stockroom")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help=f"Path to {CONFIG_FILENAME} (default: search from current directory)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """stockroom - inventories with custom item ids."""
    config = _load_config(config_path)
    logging.basicConfig(level=config.logging.level.upper(), format=config.logging.format)
    ctx.obj = config


@cli.command()
@click.option("--database-url", help="PostgreSQL connection URL")
@click.option("--force", is_flag=True, help=f"Overwrite an existing {CONFIG_FILENAME}")
def init(database_url: str | None, force: bool) -> None:
    """Write a default stockroom.toml in the current directory."""
    path = Path.cwd() / CONFIG_FILENAME
    if path.exists() and not force:
        click.echo(f"Error: {path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    config = Config()
    if database_url:
        config.database.url = database_url
    config.to_toml(path)
    click.echo(f"Wrote {path}")


@cli.command("init-db")
@click.pass_obj
def init_db(config: Config) -> None:
    """Create the stockroom tables in the configured database."""
    with _open_backend(config) as backend:
        if not isinstance(backend, DirectBackend):
            click.echo("Error: init-db requires the 'direct' backend", err=True)
            sys.exit(1)
        backend.create_tables()
    click.echo(f"Tables created in schema '{config.database.schema_name}'")


@cli.command("create-inventory")
@click.argument("name")
@click.option("--format", "format_file", type=click.File("r"), help="Custom id format document")
@click.option("--owner", default="", help="Owner user id")
@click.option("--public", "is_public", is_flag=True, help="Make the inventory public")
@click.pass_obj
def create_inventory(
    config: Config,
    name: str,
    format_file: TextIO | None,
    owner: str,
    is_public: bool,
) -> None:
    """Create an inventory, optionally with a custom id format."""
    with _open_backend(config) as backend:
        service = InventoryService(backend)
        try:
            inventory = service.create_inventory(name, owner_id=owner, is_public=is_public)
            if format_file is not None:
                inventory = service.save_id_format(
                    inventory.id, format_file.read(), inventory.version
                )
        except (InventoryDataError, MalformedFormatError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    click.echo(inventory.id)


@cli.command()
@click.argument("inventory_id")
@click.option("--count", type=int, default=10, help="Number of items to create (default: 10)")
@click.option("--json", "output_json", is_flag=True, help="Output created items as JSON")
@click.pass_obj
def seed(config: Config, inventory_id: str, count: int, output_json: bool) -> None:
    """Fill an inventory with generated items."""
    with _open_backend(config) as backend:
        seeder = InventorySeeder(
            ItemService(backend, max_retries=config.ids.max_retries),
            CustomFieldService(backend),
        )
        try:
            items = seeder.seed(inventory_id, count)
        except (InventoryDataError, MalformedFormatError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    for item in items:
        if output_json:
            click.echo(json.dumps({"id": item.id, "customId": item.custom_id}))
        else:
            click.echo(item.custom_id or item.id)


@cli.command("refresh-ids")
@click.argument("inventory_id")
@click.pass_obj
def refresh_ids(config: Config, inventory_id: str) -> None:
    """Bring stale custom ids in line with the inventory's current format."""
    with _open_backend(config) as backend:
        service = ItemService(backend, max_retries=config.ids.max_retries)
        try:
            refreshed = service.refresh_stale_ids(inventory_id)
        except (InventoryDataError, MalformedFormatError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    click.echo(f"Refreshed {refreshed} item(s)")


@cli.command("preview-id")
@click.argument("inventory_id")
@click.pass_obj
def preview_id(config: Config, inventory_id: str) -> None:
    """Show the custom id the next item would receive."""
    with _open_backend(config) as backend:
        try:
            preview = ItemService(backend).preview_id(inventory_id)
        except (InventoryDataError, MalformedFormatError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if preview is None:
        click.echo("Inventory has no custom id format", err=True)
        sys.exit(1)
    click.echo(preview.value)
