from __future__ import annotations

import sys
from typing import Optional

import typer

from src.challenges.registry import available_challenges, get_challenge
from src.config import get_settings
from src.exceptions import UnknownChallengeError
from src.infrastructure.db_factory import check_connection, get_engine, init_schema, session_scope
from src.metrics import compute_report, load_snapshot, rank_by_engagement
from src.orchestrator import run_challenges
from src.reporter import print_challenges, print_report, print_results, print_user_metrics
from src.seeding import load_dataset
from src.utils.logging import configure_from_settings

app = typer.Typer(help="Blog Query Challenges CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    engine = get_engine()
    typer.echo(
        f"DB={engine.url.render_as_string(hide_password=True)} | env={settings.app_env} "
        f"log_level={settings.log_level} seed={settings.factory_seed} "
        f"results_dir={settings.results_dir}"
    )


@app.command()
def challenges(
    level: Optional[int] = typer.Option(None, "--level", "-l", help="Only list one level (1-8)."),
) -> None:
    """
    List the available challenges.
    """
    print_challenges(get_challenge(key) for key in available_challenges(level))


@app.command()
def run(
    challenge: str = typer.Option(
        "all",
        "--challenge",
        "--challenges",
        "-c",
        help="Challenge key(s), comma separated (e.g. 1.1,7.2), or 'all'.",
    ),
    level: Optional[int] = typer.Option(
        None, "--level", "-l", help="With 'all', only run challenges of this level."
    ),
    runs: int = typer.Option(1, "--runs", "-n", min=1, help="Measurement runs per challenge."),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Optional SQLAlchemy URL override."
    ),
    no_persist: bool = typer.Option(
        False, "--no-persist", help="Do not write results/latest.json and the archive."
    ),
) -> None:
    """
    Run challenge solutions via the orchestrator, print and persist results.
    """
    configure_from_settings()

    keys = [key.strip() for key in challenge.split(",") if key.strip()]
    engine = get_engine(database_url)
    check_connection(engine)
    try:
        results = run_challenges(
            keys=keys or ["all"], level=level, engine=engine, persist=not no_persist, runs=runs
        )
    except UnknownChallengeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    print_results(results)
    if any(res.get("error") for res in results):
        raise typer.Exit(code=1)


@app.command()
def metrics(
    full: bool = typer.Option(
        False, "--full", help="Also show post metrics, tag usage and the audience split."
    ),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Optional SQLAlchemy URL override."
    ),
) -> None:
    """
    Compute aggregate metrics for every user in the database.
    """
    configure_from_settings()

    engine = get_engine(database_url)
    with session_scope(engine) as session:
        report = compute_report(load_snapshot(session))

    if full:
        print_report(report)
    else:
        print_user_metrics(rank_by_engagement(report.users), title="Users by Engagement")


@app.command()
def seed(
    dataset: str = typer.Option(
        "blog", "--dataset", "-d", help="Dataset to load: 'blog' or 'challenge'."
    ),
    no_reset: bool = typer.Option(False, "--no-reset", help="Keep existing rows."),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Optional SQLAlchemy URL override."
    ),
) -> None:
    """
    Create the schema if needed and load a seed dataset.
    """
    configure_from_settings()

    engine = get_engine(database_url)
    check_connection(engine)
    init_schema(engine)
    try:
        with session_scope(engine) as session:
            counts = load_dataset(session, dataset, reset=not no_reset)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    for table, count in counts.items():
        typer.echo(f"- {table}: {count}")


@app.command("init-db")
def init_db(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables first."),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Optional SQLAlchemy URL override."
    ),
) -> None:
    """
    Create the blog tables.
    """
    engine = get_engine(database_url)
    check_connection(engine)
    init_schema(engine, drop_first=drop)
    typer.echo("Schema ready.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
