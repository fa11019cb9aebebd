from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from src import main
from scripts import seed_data

runner = CliRunner()


@pytest.fixture()
def database_url(tmp_path: Path, monkeypatch) -> str:
    # Keep the CLI from replacing pytest's logging handlers.
    monkeypatch.setattr(main, "configure_from_settings", lambda: None)
    monkeypatch.setattr(seed_data, "configure_from_settings", lambda: None)
    monkeypatch.setenv("COLUMNS", "200")
    return f"sqlite+pysqlite:///{tmp_path / 'blog.db'}"


def test_challenges_lists_one_level() -> None:
    result = runner.invoke(main.app, ["challenges", "--level", "3"])
    assert result.exit_code == 0
    assert "3.1" in result.output
    assert "4.1" not in result.output


def test_seed_then_run(database_url: str) -> None:
    seeded = runner.invoke(
        main.app, ["seed", "--dataset", "challenge", "--database-url", database_url]
    )
    assert seeded.exit_code == 0, seeded.output
    assert "- users: 3" in seeded.output

    result = runner.invoke(
        main.app, ["run", "-c", "1.1,1.4", "--database-url", database_url, "--no-persist"]
    )
    assert result.exit_code == 0, result.output
    assert "2 passed, 0 failed" in result.output


def test_run_unknown_challenge_exits_2(database_url: str) -> None:
    runner.invoke(main.app, ["init-db", "--database-url", database_url])
    result = runner.invoke(
        main.app, ["run", "-c", "9.9", "--database-url", database_url, "--no-persist"]
    )
    assert result.exit_code == 2


def test_seed_unknown_dataset_exits_2(database_url: str) -> None:
    result = runner.invoke(main.app, ["seed", "--dataset", "shop", "--database-url", database_url])
    assert result.exit_code == 2


def test_metrics_command(database_url: str) -> None:
    runner.invoke(main.app, ["seed", "--dataset", "challenge", "--database-url", database_url])
    result = runner.invoke(main.app, ["metrics", "--database-url", database_url])
    assert result.exit_code == 0, result.output
    assert "John Doe" in result.output


def test_seed_script_blog_dataset(database_url: str) -> None:
    result = runner.invoke(seed_data.app, ["--dataset", "blog", "--database-url", database_url])
    assert result.exit_code == 0, result.output
    assert "- post_tags: 32" in result.output
