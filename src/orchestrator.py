"""
Orchestrator for running challenge solutions, profiling them, and persisting results.

Usage (example from CLI):
    from src.orchestrator import run_challenges

    results = run_challenges(keys=["3.1", "7.2"])
    print(results)

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
import statistics
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy.engine import Engine

from src.challenges.abstract import Challenge, ChallengeResult
from src.challenges.registry import available_challenges, get_challenge
from src.config import get_settings
from src.infrastructure.db_factory import get_engine, session_scope
from src.utils.logging import get_logger
from src.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)

PREVIEW_LENGTH = 120


def _round_float(value: float, decimals: int = 4) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _describe(value: Any) -> str:
    if isinstance(value, BaseModel):
        return repr(value.model_dump())
    if hasattr(value, "_mapping"):
        # SQLAlchemy Row
        return repr({key: _describe(item) for key, item in value._mapping.items()})
    return repr(value)


def _summarize(result: Any) -> tuple[int, str]:
    """Row count and a short preview of a solution's return value."""
    if result is None:
        return 0, "None"
    if isinstance(result, dict):
        rows, items = len(result), [f"{k!r}: {v!r}" for k, v in list(result.items())[:3]]
        preview = "{" + ", ".join(items) + (", ...}" if rows > 3 else "}")
    elif isinstance(result, (list, tuple)):
        rows = len(result)
        preview = "[" + ", ".join(_describe(item) for item in result[:3])
        preview += ", ...]" if rows > 3 else "]"
    elif hasattr(result, "as_dict"):
        split = result.as_dict()
        rows = sum(len(group) for group in split.values())
        preview = ", ".join(f"{role}: {len(group)}" for role, group in split.items())
    else:
        rows, preview = 1, _describe(result)

    if len(preview) > PREVIEW_LENGTH:
        preview = preview[: PREVIEW_LENGTH - 3] + "..."
    return rows, preview


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    with latest_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=str)
    with archive_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=str)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def _profiled_execute(challenge: Challenge, engine: Engine) -> ChallengeResult:
    log.info(f"[CHALLENGE START] {challenge.key}", extra={"challenge": challenge.key})
    result = ChallengeResult(key=challenge.key, title=challenge.title, level=challenge.level)
    with profile_block(challenge.key, engine=engine) as stats:
        try:
            with session_scope(engine) as session:
                rows, preview = _summarize(challenge.run(session))
            result.update(rows=rows, preview=preview, error=None)
            log.info(
                f"[CHALLENGE SUCCESS] {challenge.key}",
                extra={"challenge": challenge.key, "rows": rows},
            )
        except Exception as exc:  # noqa: BLE001 - record the failure and keep going
            log.exception(f"[CHALLENGE FAILED] {challenge.key}", extra={"challenge": challenge.key})
            result.update(rows=0, preview="", error=str(exc))

    return _merge_result(result, stats)


def _merge_result(result: ChallengeResult, stats: ProfileStats) -> ChallengeResult:
    """Merge a challenge result with profiler stats, rounding floats for readability."""
    merged = ChallengeResult(**result)
    merged.setdefault("rows", 0)
    merged["duration_seconds"] = _round_float(stats.duration_seconds)
    merged["query_count"] = stats.query_count
    merged["peak_rss_bytes"] = stats.peak_rss_bytes
    merged["cpu_percent"] = _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None
    return merged


def _aggregate_runs(run_results: List[ChallengeResult]) -> ChallengeResult:
    """
    Collapse repeated runs of one challenge into a single result.

    Duration is the median; the other fields come from the last run.
    """
    durations = [r["duration_seconds"] for r in run_results]
    aggregated = ChallengeResult(**run_results[-1])
    aggregated["duration_seconds"] = _round_float(statistics.median(durations))
    errors = [r["error"] for r in run_results if r.get("error")]
    if errors:
        aggregated["error"] = errors[0]
    return aggregated


def _resolve_keys(keys: Optional[Iterable[str]], level: Optional[int]) -> List[str]:
    names = list(keys) if keys is not None else ["all"]
    if len(names) == 1 and names[0] == "all":
        return available_challenges(level)
    return names


def run_challenges(
    keys: Optional[Iterable[str]] = None,
    level: Optional[int] = None,
    database_url: Optional[str] = None,
    results_dir: Path | str | None = None,
    persist: bool = True,
    runs: int = 1,
    engine: Optional[Engine] = None,
) -> List[ChallengeResult]:
    """
    Run one or more challenge solutions and optionally persist the results.

    Parameters
    ----------
    keys : iterable[str] | None
        Challenge keys to execute. If None or ["all"], executes every
        challenge (of `level`, when given).
    level : int | None
        Restrict "all" to one level.
    database_url : str | None
        SQLAlchemy URL override; defaults to the configured database.
    results_dir : Path | str | None
        Directory to store JSON artifacts. Defaults to settings.results_dir.
    persist : bool
        Whether to write results to disk.
    runs : int
        Measurement runs per challenge; the reported duration is the median.
    engine : Engine | None
        Engine to run against; takes precedence over `database_url`.

    Returns
    -------
    List[ChallengeResult]
        One result per challenge, in execution order.

    Raises
    ------
    UnknownChallengeError
        If a key does not name a registered challenge. Raised before any
        challenge runs.
    """
    settings = get_settings()
    challenges = [get_challenge(key) for key in _resolve_keys(keys, level)]
    engine = engine or get_engine(database_url)

    results: List[ChallengeResult] = []
    for index, challenge in enumerate(challenges, start=1):
        log.info(
            f"[{index}/{len(challenges)}] {challenge.key} {challenge.title}",
            extra={"challenge": challenge.key, "level": challenge.level, "runs": runs},
        )
        run_results = [_profiled_execute(challenge, engine) for _ in range(max(runs, 1))]
        results.append(_aggregate_runs(run_results) if len(run_results) > 1 else run_results[0])

    failed = [r["key"] for r in results if r.get("error")]
    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": engine.url.render_as_string(hide_password=True),
        "challenges": [challenge.key for challenge in challenges],
        "runs": runs,
        "results": results,
    }

    if persist:
        _persist_results(payload, Path(results_dir or settings.results_dir))

    log.info(
        f"[ORCHESTRATOR COMPLETE] {len(results) - len(failed)}/{len(results)} challenges passed",
        extra={"challenges": len(results), "failed": failed},
    )

    return results


__all__ = [
    "run_challenges",
]
