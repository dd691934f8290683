"""
Command-line interface for mongo_erd.

Provides generate, discover, databases and serve commands for building
Mermaid ER diagrams from sampled MongoDB collections.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional, Set, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mongo_erd import __version__
from mongo_erd.config import collect_values
from mongo_erd.exceptions import ConfigError, ConnectivityError
from mongo_erd.models import ErdConfig

# Status, tables and logs go to stderr; stdout carries only the diagram
console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def connection_options(func: Callable) -> Callable:
    """Options shared by every command that talks to MongoDB."""
    func = click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, path_type=Path),
        default=None,
        help="YAML file with configuration values",
    )(func)
    func = click.option(
        "--url",
        type=str,
        envvar="MONGO_URL",
        default=None,
        help="MongoDB connection string (env: MONGO_URL, default: mongodb://localhost:27017)",
    )(func)
    return func


def database_options(func: Callable) -> Callable:
    """Options selecting the database and sampling behaviour."""
    func = click.option(
        "--workers",
        type=int,
        default=None,
        help="Collections sampled concurrently (default: 1, sequential)",
    )(func)
    func = click.option(
        "--sample-size",
        type=int,
        envvar="ERD_SAMPLE_SIZE",
        default=None,
        help="Documents sampled per collection (env: ERD_SAMPLE_SIZE, default: 100)",
    )(func)
    func = click.option(
        "--db",
        "db_name",
        type=str,
        envvar="MONGO_DB",
        default=None,
        help="Database to analyze (env: MONGO_DB; prompted for when omitted)",
    )(func)
    return func


def build_config(config_file: Optional[Path], **overrides: Any) -> Tuple[ErdConfig, Set[str]]:
    """
    Resolve the run configuration or exit with an error.

    Returns:
        The config and the names of the fields set by a flag, the
        environment or the config file
    """
    try:
        values = collect_values(overrides, config_file=config_file)
        return ErdConfig(**values), set(values)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def open_extractor(config: ErdConfig):
    """Connect to MongoDB or exit with an error."""
    from mongo_erd.metadata import MongoMetadataExtractor

    extractor = MongoMetadataExtractor(config.url)
    console.print("Connecting to MongoDB...")
    try:
        extractor.connect()
    except ConnectivityError as e:
        console.print(f"[red]Error connecting to MongoDB: {e}[/red]")
        sys.exit(1)
    console.print("[green]Connected successfully[/green]")
    return extractor


def select_database(extractor) -> str:
    """Ask the user which database to analyze."""
    databases = extractor.list_databases()
    if not databases:
        console.print("[red]No databases found. Please check your connection string.[/red]")
        sys.exit(1)

    for i, db in enumerate(databases, start=1):
        console.print(f"  {i}. {db.label}")

    choice = click.prompt(
        "Select a database to generate ERD",
        type=click.IntRange(1, len(databases)),
        default=1,
        err=True,
    )
    return databases[choice - 1].name


@click.group()
@click.version_option(version=__version__, prog_name="mongo-erd")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """
    MongoDB ERD - Entity-relationship diagrams from sampled collections

    Infers collection schemas, ObjectId references and junction tables and
    renders them as Mermaid erDiagram text.
    """
    setup_logging(verbose)


@cli.command()
@connection_options
@database_options
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the diagram to this file instead of stdout",
)
def generate(
    config_file: Optional[Path],
    url: Optional[str],
    db_name: Optional[str],
    sample_size: Optional[int],
    workers: Optional[int],
    output: Optional[Path],
) -> None:
    """
    Generate a Mermaid ER diagram for a database.

    Examples:

        # Print the diagram for the "shop" database
        mongo-erd generate --db shop

        # Larger sample, four collections sampled at a time, saved to a file
        mongo-erd generate --url mongodb://db:27017 --db shop \\
            --sample-size 500 --workers 4 --output shop.mmd
    """
    from mongo_erd.discovery import generate_erd

    config, explicit = build_config(
        config_file, url=url, db_name=db_name, sample_size=sample_size, max_workers=workers,
    )
    extractor = open_extractor(config)

    try:
        if "db_name" not in explicit:
            config = replace(config, db_name=select_database(extractor))

        console.print(f"Generating ERD for [cyan]{config.db_name}[/cyan]...", highlight=False)
        diagram = generate_erd(config, extractor=extractor, show_progress=output is not None)
    except ConnectivityError as e:
        console.print(f"[red]Error generating ERD: {e}[/red]")
        sys.exit(1)
    finally:
        extractor.disconnect()

    if output:
        output = Path(output)
        output.write_text(diagram)
        console.print(f"\n[green]Saved diagram to: {output}[/green]")
    else:
        click.echo(diagram)


@cli.command()
@connection_options
@database_options
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output directory for erd.mmd and relationships.yaml",
)
def discover(
    config_file: Optional[Path],
    url: Optional[str],
    db_name: Optional[str],
    sample_size: Optional[int],
    workers: Optional[int],
    output: Optional[Path],
) -> None:
    """
    Discover collection schemas and relationships.

    Examples:

        mongo-erd discover --db shop

        # Save the diagram and a YAML report
        mongo-erd discover --db shop --output reports/shop
    """
    from mongo_erd.discovery import ErdPipeline
    from mongo_erd.output import ReportWriter

    config, explicit = build_config(
        config_file, url=url, db_name=db_name, sample_size=sample_size, max_workers=workers,
    )
    extractor = open_extractor(config)

    try:
        if "db_name" not in explicit:
            config = replace(config, db_name=select_database(extractor))

        console.print("[bold blue]MongoDB ERD - Relationship Discovery[/bold blue]")
        console.print(f"Database: {config.db_name}")
        console.print(f"Sample size: {config.sample_size}")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Sampling collections and detecting relationships...", total=None)
            result = ErdPipeline(extractor, config).run()
            progress.update(task, completed=True)
    except ConnectivityError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        extractor.disconnect()

    console.print(f"\n[green]Discovery complete![/green]")

    # Collections table
    collections_table = Table(title="Collections")
    collections_table.add_column("Collection", style="cyan")
    collections_table.add_column("Fields", style="green", justify="right")
    collections_table.add_column("Junction", style="yellow")

    for name, schema in result.schemas.items():
        collections_table.add_row(
            name,
            str(len(schema)),
            "yes" if name in result.junction_tables else "-",
        )

    console.print(collections_table)

    # Relationships table
    if result.relationships:
        rel_table = Table(title="Discovered Relationships")
        rel_table.add_column("Source", style="cyan")
        rel_table.add_column("Field", style="green")
        rel_table.add_column("Target", style="yellow")
        rel_table.add_column("Cardinality", style="blue")
        rel_table.add_column("Matches", justify="right")
        rel_table.add_column("Confidence", style="magenta", justify="right")

        for rel in result.relationships:
            rel_table.add_row(
                rel.source_collection,
                rel.source_field,
                rel.target_collection + (" (self)" if rel.is_self_reference else ""),
                rel.cardinality.value,
                str(rel.match_count),
                f"{rel.confidence:.2f}",
            )

        console.print(rel_table)
    else:
        console.print("\n[yellow]No relationships discovered.[/yellow]")
        console.print("Try a larger --sample-size so referenced documents are included.")

    if output:
        paths = ReportWriter(output).write(result)
        for kind, path in paths.items():
            console.print(f"[green]Saved {kind} to: {path}[/green]")


@cli.command()
@connection_options
def databases(config_file: Optional[Path], url: Optional[str]) -> None:
    """
    List databases with their on-disk size.

    Example:

        mongo-erd databases --url mongodb://localhost:27017
    """
    config, _ = build_config(config_file, url=url)
    extractor = open_extractor(config)
    try:
        infos = extractor.list_databases()
    except ConnectivityError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        extractor.disconnect()

    from mongo_erd.metadata import format_bytes

    table = Table(title="Databases")
    table.add_column("Database", style="cyan")
    table.add_column("Size", style="green", justify="right")
    for info in infos:
        table.add_row(info.name, format_bytes(info.size_on_disk))

    console.print(table)


@cli.command()
@connection_options
@database_options
@click.option("--host", type=str, default=None, help="Bind address (default: 127.0.0.1)")
@click.option("--port", type=int, envvar="PORT", default=None, help="Port (env: PORT, default: 3333)")
def serve(
    config_file: Optional[Path],
    url: Optional[str],
    db_name: Optional[str],
    sample_size: Optional[int],
    workers: Optional[int],
    host: Optional[str],
    port: Optional[int],
) -> None:
    """
    Serve the ERD over HTTP at /erd.

    Each request samples the database again, so the diagram is always current.

    Example:

        mongo-erd serve --db shop --port 3333
    """
    from mongo_erd.server import run_server

    config, _ = build_config(
        config_file, url=url, db_name=db_name, sample_size=sample_size,
        max_workers=workers, host=host, port=port,
    )
    console.print(f"[bold blue]Serving ERD for {config.db_name}[/bold blue]")
    console.print(f"Open http://{config.host}:{config.port}/erd")
    run_server(config)


if __name__ == "__main__":
    cli()
