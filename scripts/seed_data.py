"""
Seed loader for the Blog Query Challenges.

Loads either the demo blog dataset or the canonical challenge fixture into the
configured database, clearing existing rows first unless told otherwise.
"""

from __future__ import annotations

import sys
import time

import typer

from src.infrastructure.db_factory import check_connection, get_engine, init_schema, session_scope
from src.seeding import DATASETS, load_dataset
from src.utils.logging import configure_from_settings

app = typer.Typer(help="Seed the blog database with the demo dataset or the challenge fixture.")


@app.command()
def main(
    dataset: str = typer.Option(
        "blog",
        "--dataset",
        "-d",
        help="Dataset to load: 'blog' (demo content) or 'challenge' (canonical fixture).",
    ),
    no_reset: bool = typer.Option(
        False,
        "--no-reset",
        help="Keep existing rows instead of clearing the tables first.",
    ),
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        help="Optional SQLAlchemy URL override.",
    ),
    create_schema: bool = typer.Option(
        True,
        "--create-schema/--no-create-schema",
        help="Create missing tables before seeding.",
    ),
) -> None:
    """
    Seed the database and print the resulting row counts.
    """
    if dataset not in DATASETS:
        choices = ", ".join(DATASETS)
        typer.echo(f"Unknown dataset '{dataset}'. Choose from: {choices}", err=True)
        raise typer.Exit(code=2)

    configure_from_settings()

    start = time.perf_counter()
    engine = get_engine(database_url)
    check_connection(engine)
    if create_schema:
        init_schema(engine)

    typer.echo(f"Seeding '{dataset}' dataset (reset={not no_reset})...")
    with session_scope(engine) as session:
        counts = load_dataset(session, dataset, reset=not no_reset)

    duration = time.perf_counter() - start
    for table, count in counts.items():
        typer.echo(f"- {table}: {count}")
    typer.echo(f"Seeding completed in {duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
