"""
Cross-cutting helpers: structured logging and query profiling.

`count_queries` backs the eager-loading checks; `profile_block` is what the
orchestrator wraps around every solution run.
"""

from src.utils.logging import configure_from_settings, configure_logging, get_logger
from src.utils.profiler import ProfileStats, QueryCounter, count_queries, profile_block

__all__ = [
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "QueryCounter",
    "count_queries",
    "profile_block",
]
