"""
Blog Query Challenges - ORM query exercises over a small blog schema.

This package provides:

- The blog schema (users, posts, comments, tags, post_tags) as SQLAlchemy models
- Reference solutions for 32 query challenges in eight levels
- Aggregate user, post and tag metrics as typed records
- Fixture builders with presets, sequences and transient attributes
- Seed datasets and a profiling runner with a typer CLI
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from src.challenges import Challenge, ChallengeResult, available_challenges, get_challenge
from src.config import Settings, get_settings
from src.domain.records import AudienceSplit, MetricsReport, PostMetrics, TagUsage, UserMetrics
from src.orchestrator import run_challenges
from src.utils.logging import configure_from_settings, configure_logging, get_logger
from src.utils.profiler import ProfileStats, count_queries, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Challenges
    "Challenge",
    "ChallengeResult",
    "available_challenges",
    "get_challenge",
    "run_challenges",
    # Records
    "UserMetrics",
    "PostMetrics",
    "TagUsage",
    "AudienceSplit",
    "MetricsReport",
    # Logging
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "count_queries",
    "profile_block",
]
