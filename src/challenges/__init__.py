"""
Challenges package for the Blog Query Challenges.

Re-exports the challenge contract and the registry so downstream code can
import from `src.challenges` directly. The solution modules are grouped by
level: basics (1-2), joins (3), aggregations (4-5), advanced (6-7) and
master (8).
"""

from src.challenges.abstract import LEVELS, Challenge, ChallengeResult, Solution
from src.challenges.registry import available_challenges, challenges_by_level, get_challenge

__all__ = [
    # Contract
    "LEVELS",
    "Challenge",
    "ChallengeResult",
    "Solution",
    # Registry
    "available_challenges",
    "challenges_by_level",
    "get_challenge",
]
