"""CLI commands for prisma-seed."""

import logging
import sys
from pathlib import Path

import click
import psycopg

from prisma_seed.backends import PostgresSink
from prisma_seed.config import CONFIG_FILENAME, SeederConfig
from prisma_seed.dependency import resolve_seed_order
from prisma_seed.exceptions import ConfigError, ModelNotFoundError, PrismaSeedError, SinkError
from prisma_seed.models import SchemaModel
from prisma_seed.schema import load_schema
from prisma_seed.seeder import Seeder


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_models(schema: str) -> list[SchemaModel]:
    try:
        return load_schema(schema)
    except PrismaSeedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="prisma-seed")
def cli() -> None:
    """prisma-seed - fill a database with fake data described by a Prisma schema."""
    pass


@cli.command()
@click.argument("schema", type=click.Path())
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def inspect(schema: str, verbose: bool) -> None:
    """Show parsed models and the order they would be seeded in."""
    _configure_logging(verbose)
    models = _load_models(schema)

    if not models:
        click.echo("No models found.")
        return

    for model in models:
        click.echo(f"model {model.name}")
        for field in model.fields:
            flags = []
            if field.is_primary_key:
                flags.append("pk")
            if field.is_unique:
                flags.append("unique")
            if not field.is_required:
                flags.append("optional")
            if field.is_foreign_key:
                flags.append(f"fk -> {field.relation_model or '?'}")
            suffix = f"  [{', '.join(flags)}]" if flags else ""
            click.echo(f"  {field.name}: {field.type}{suffix}")

    order = [model.name for model in resolve_seed_order(models)]
    click.echo(f"Seed order: {' -> '.join(order)}")


@cli.command()
@click.argument("schema", type=click.Path())
@click.option("--config", "config_path", type=click.Path(), help="Config file (toml/json/yaml)")
@click.option("--db-url", envvar="DATABASE_URL", required=True, help="PostgreSQL connection URL")
@click.option("--db-schema", default="public", help="Database schema (default: public)")
@click.option("--model", "model_name", help="Seed only this model")
@click.option("--count", type=int, help="Record count (with --model)")
@click.option("--reset", is_flag=True, help="Delete existing data before seeding")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def seed(
    schema: str,
    config_path: str | None,
    db_url: str,
    db_schema: str,
    model_name: str | None,
    count: int | None,
    reset: bool,
    verbose: bool,
) -> None:
    """Generate records for SCHEMA and insert them into PostgreSQL."""
    _configure_logging(verbose)
    if count is not None and not model_name:
        click.echo("Error: --count requires --model (set per-model counts in the config)", err=True)
        sys.exit(1)
    models = _load_models(schema)

    try:
        config = SeederConfig.load(config_path) if config_path else SeederConfig()
    except (ConfigError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if reset:
        config.global_.reset = True

    id_columns = {m.name: m.primary_key.name for m in models if m.primary_key}
    try:
        sink = PostgresSink.connect(db_url, schema=db_schema, id_columns=id_columns)
    except psycopg.Error as e:
        click.echo(f"Error: could not connect to database: {e}", err=True)
        sys.exit(1)

    try:
        seeder = Seeder(models, sink, config=config)
        if model_name:
            if reset:
                sink.delete_all(model_name)
            results = [seeder.seed(model_name, count)]
        else:
            results = seeder.seed_all()
    except (ModelNotFoundError, SinkError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        sink.close()

    failed = False
    for result in results:
        mark = "✓" if result.success else "✗"
        line = f"{mark} {result.model}: {result.count} records"
        if result.error:
            line += f" (last error: {result.error})"
        click.echo(line)
        failed = failed or not result.success

    sys.exit(1 if failed else 0)


@cli.command()
@click.option("--path", "target", type=click.Path(), default=CONFIG_FILENAME, help="Output file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(target: str, force: bool) -> None:
    """Write a starter prisma-seed.toml."""
    path = Path(target)
    if path.exists() and not force:
        click.echo(f"Error: {path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    SeederConfig().to_toml(path)
    click.echo(f"✓ Wrote {path}")


if __name__ == "__main__":
    cli()
