"""
cosmosrest Command-Line Interface

Signs requests and reads resources from a Cosmos DB account.
"""

import sys
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError

from cosmosrest import __version__
from cosmosrest.auth.exceptions import AuthenticationError
from cosmosrest.auth.masterkey import Credentials, authorization_headers, parse_date
from cosmosrest.client import CosmosClient
from cosmosrest.core.config_manager import ConfigManager, CosmosRestConfig
from cosmosrest.core.logging_config import set_correlation_id, setup_logging
from cosmosrest.services.cosmosdb.exceptions import CosmosDBError, CosmosHTTPError
from cosmosrest.services.cosmosdb.options import Options

logger = logging.getLogger("cosmosrest.cli")


def _echo_json(value: Any) -> None:
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
    click.echo(json.dumps(value, indent=2))


def _fail(message: str) -> None:
    click.echo(f"[ERROR] {message}", err=True)
    sys.exit(1)


def _client(ctx: click.Context) -> CosmosClient:
    config: CosmosRestConfig = ctx.obj["config"]
    try:
        return CosmosClient.from_config(config)
    except (ValueError, AuthenticationError) as e:
        _fail(str(e))


def _run(operation):
    """Run a client call, turning client errors into a CLI failure."""
    try:
        return operation()
    except CosmosHTTPError as e:
        if e.status_code == 404:
            _fail("Resource not found")
        _fail(f"Request failed: {e}")
    except CosmosDBError as e:
        _fail(f"Request failed: {e.message}")


@click.group()
@click.version_option(version=__version__, prog_name="cosmosrest")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx, config: Optional[Path], log_level: Optional[str]):
    """
    cosmosrest - Azure Cosmos DB REST client

    Credentials come from the configuration file or the COSMOSREST_ACCOUNT /
    COSMOSREST_MASTER_KEY / COSMOSREST_CONNECTION_STRING environment variables.
    """
    ctx.ensure_object(dict)

    overrides = {"logging": {"level": log_level.upper()}} if log_level else None
    try:
        loaded = ConfigManager().load(config_file=str(config) if config else None, cli_overrides=overrides)
    except (ValidationError, ValueError) as e:
        _fail(f"Invalid configuration: {e}")

    setup_logging(
        level=loaded.logging.level,
        format_type=loaded.logging.format,
        log_file=loaded.logging.file,
        rotation_size=loaded.logging.rotation_size,
        rotation_count=loaded.logging.rotation_count,
        module_levels=loaded.logging.module_levels,
    )
    set_correlation_id(uuid.uuid4().hex[:12])
    ctx.obj["config"] = loaded


@cli.command()
@click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")
@click.option("--resource-type", "-t", required=True, help="Resource type (dbs, colls, docs, ...)")
@click.option("--resource-link", "-l", default="", help="Resource link, e.g. dbs/mydb")
@click.option("--date", "-d", default=None, help="x-ms-date to sign (RFC 1123, defaults to now)")
@click.pass_context
def sign(ctx, method: str, resource_type: str, resource_link: str, date: Optional[str]):
    """
    Print the Authorization and x-ms-date headers for a request.

    Examples:
        cosmosrest sign -t colls -l dbs/mydb
        cosmosrest sign -X POST -t docs -l dbs/mydb/colls/orders -d "Mon, 01 Jan 2018 00:00:00 GMT"
    """
    config: CosmosRestConfig = ctx.obj["config"]
    try:
        credentials: Credentials = config.account.credentials()
        moment = parse_date(date) if date else datetime.now(timezone.utc)
    except (ValueError, AuthenticationError) as e:
        _fail(str(e))

    headers = authorization_headers(credentials, method, resource_type, resource_link, moment)
    for name, value in headers.items():
        click.echo(f"{name}: {value}")


@cli.group()
def databases():
    """Database commands."""


@databases.command("list")
@click.pass_context
def list_databases(ctx):
    """List the databases of the account."""
    with _client(ctx) as client:
        for page in _run(lambda: list(client.databases.list())):
            for database in page.resources:
                click.echo(database.id)


@cli.group()
def collections():
    """Collection commands."""


@collections.command("list")
@click.argument("database_id")
@click.pass_context
def list_collections(ctx, database_id: str):
    """
    List the collections of a database.

    Example:
        cosmosrest collections list mydb
    """
    with _client(ctx) as client:
        for page in _run(lambda: list(client.collections(database_id).list())):
            for collection in page.resources:
                click.echo(collection.id)


@collections.command("get")
@click.argument("database_id")
@click.argument("collection_id")
@click.pass_context
def get_collection(ctx, database_id: str, collection_id: str):
    """Show a collection definition."""
    with _client(ctx) as client:
        _echo_json(_run(lambda: client.collections(database_id).get(collection_id)))


@collections.command("pkranges")
@click.argument("database_id")
@click.argument("collection_id")
@click.pass_context
def partition_key_ranges(ctx, database_id: str, collection_id: str):
    """Show the partition key ranges of a collection."""
    with _client(ctx) as client:
        _echo_json(_run(lambda: client.collections(database_id).partition_key_ranges(collection_id)))


@cli.group()
def documents():
    """Document commands."""


@documents.command("get")
@click.argument("database_id")
@click.argument("collection_id")
@click.argument("document_id")
@click.option("--partition-key", "-k", default=None, help="Partition key value (JSON or plain string)")
@click.pass_context
def get_document(ctx, database_id: str, collection_id: str, document_id: str, partition_key: Optional[str]):
    """
    Show a document.

    Example:
        cosmosrest documents get mydb orders order-1 -k '"customer-7"'
    """
    options = None
    if partition_key is not None:
        try:
            value = json.loads(partition_key)
        except ValueError:
            value = partition_key
        options = Options(partition_key=value)

    with _client(ctx) as client:
        _echo_json(_run(lambda: client.documents(database_id, collection_id).get(document_id, options)))


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
