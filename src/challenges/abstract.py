"""
Challenge interfaces and result contracts for the Blog Query Challenges.

A challenge pairs a numbered exercise ("4.2") with its reference solution: a
callable taking a SQLAlchemy session plus keyword parameters. The registry
(`src.challenges.registry`) lists them; the orchestrator profiles them and
returns a ChallengeResult per run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol, TypedDict, runtime_checkable

from sqlalchemy.orm import Session

LEVELS: Mapping[int, str] = MappingProxyType(
    {
        1: "Basic Queries",
        2: "Filtering & Conditions",
        3: "Associations & Joins",
        4: "Aggregations & Grouping",
        5: "Complex Queries",
        6: "Advanced Queries",
        7: "Expert Queries",
        8: "Master Queries",
    }
)


@runtime_checkable
class Solution(Protocol):
    """Reference solution: runs its query on `session` and returns the result."""

    def __call__(self, session: Session, **params: Any) -> Any:
        ...


class ChallengeResult(TypedDict, total=False):
    """
    Metrics contract for one profiled solution run.

    Fields are optional so a failed run can still be reported.
    """

    key: str
    title: str
    level: int
    rows: int
    duration_seconds: float
    query_count: Optional[int]
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    preview: str
    error: Optional[str]


@dataclass(frozen=True)
class Challenge:
    """
    A numbered exercise with its reference solution and default parameters.

    Attributes
    ----------
    key : str
        "<level>.<number>", e.g. "7.3".
    title : str
        The question being asked.
    solve : Solution
        Reference solution.
    params : Mapping[str, Any]
        Keyword arguments passed to `solve` unless overridden.
    """

    key: str
    title: str
    solve: Solution
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def level(self) -> int:
        return int(self.key.split(".", 1)[0])

    @property
    def level_title(self) -> str:
        return LEVELS[self.level]

    def run(self, session: Session, **overrides: Any) -> Any:
        """Call the solution with the default params merged with `overrides`."""
        params: Dict[str, Any] = {**self.params, **overrides}
        return self.solve(session, **params)


__all__ = ["LEVELS", "Solution", "ChallengeResult", "Challenge"]
