"""
Registry of every challenge and its reference solution.

Default parameters target the canonical challenge fixture
(`src.seeding.seed_challenge_fixture`): John, Jane and Bob with five posts.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from src.challenges import advanced, aggregations, basics, joins, master
from src.challenges.abstract import Challenge
from src.exceptions import UnknownChallengeError


def _challenge_table() -> Dict[str, Challenge]:
    """Registry of available challenges, keyed "<level>.<number>"."""
    challenges = [
        # Level 1
        Challenge("1.1", "Find all users", basics.all_users),
        Challenge(
            "1.2", "Find user by email", basics.user_by_email, {"email": "john@example.com"}
        ),
        Challenge("1.3", "Find posts ordered by title", basics.posts_ordered_by_title),
        Challenge("1.4", "Count total posts", basics.count_posts),
        # Level 2
        Challenge(
            "2.1",
            "Find posts by specific user",
            basics.posts_by_author,
            {"email": "john@example.com"},
        ),
        Challenge(
            "2.2",
            "Find posts with title containing 'Rails'",
            basics.posts_with_title_containing,
            {"fragment": "Rails"},
        ),
        Challenge(
            "2.3",
            "Find users whose name starts with 'J'",
            basics.users_with_name_prefix,
            {"prefix": "J"},
        ),
        Challenge(
            "2.4",
            "Find posts created in the last day",
            basics.posts_created_within,
            {"hours": 24},
        ),
        # Level 3
        Challenge("3.1", "Find all posts with their users", joins.posts_with_authors),
        Challenge("3.2", "Find posts that have comments", joins.posts_with_comments),
        Challenge("3.3", "Find users who have written posts", joins.users_with_posts),
        Challenge(
            "3.4",
            "Find comments with post and user information",
            joins.comments_with_post_and_author,
        ),
        # Level 4
        Challenge("4.1", "Count posts per user", aggregations.post_counts_by_user),
        Challenge("4.2", "Find users with their post count", aggregations.users_with_post_count),
        Challenge("4.3", "Count comments per post", aggregations.posts_with_comment_count),
        Challenge(
            "4.4",
            "Find average number of comments per post",
            aggregations.average_comments_per_post,
        ),
        # Level 5
        Challenge(
            "5.1",
            "Find users who have both posts and comments",
            aggregations.users_with_posts_and_comments,
        ),
        Challenge(
            "5.2",
            "Find posts with more than 1 comment",
            aggregations.posts_with_more_comments_than,
            {"threshold": 1},
        ),
        Challenge(
            "5.3",
            "Find users ordered by number of posts (descending)",
            aggregations.users_by_post_count,
        ),
        Challenge("5.4", "Find posts with their tag names", aggregations.posts_with_tag_names),
        # Level 6
        Challenge(
            "6.1",
            "Find posts that have tags but no comments",
            advanced.posts_with_tags_without_comments,
        ),
        Challenge(
            "6.2", "Find users with most commented posts", advanced.users_by_comments_received
        ),
        Challenge(
            "6.3",
            "Find tags that are used in multiple posts",
            advanced.tags_used_by_multiple_posts,
        ),
        Challenge(
            "6.4",
            "Find posts with specific tag combinations",
            advanced.posts_tagged_with_all,
            {"names": ("Ruby", "Rails")},
        ),
        # Level 7
        Challenge(
            "7.1",
            "Find users who commented on posts they didn't write",
            advanced.users_commenting_on_others,
        ),
        Challenge(
            "7.2", "Find the most active user (posts + comments)", advanced.most_active_user
        ),
        Challenge(
            "7.3", "Find posts with comment-to-tag ratio", advanced.posts_with_comment_tag_ratio
        ),
        Challenge(
            "7.4", "Find users with their engagement metrics", advanced.users_with_engagement
        ),
        # Level 8
        Challenge(
            "8.1",
            "Find trending posts (posts with recent comments)",
            master.trending_posts,
            {"hours": 24},
        ),
        Challenge("8.2", "Complex user statistics", master.user_statistics),
        Challenge(
            "8.3", "Find content creators vs commenters", master.creators_and_commenters
        ),
        Challenge(
            "8.4",
            "Advanced search with multiple conditions",
            master.advanced_search,
            {"title_terms": ("Ruby", "Rails"), "tag": "Ruby", "author_prefix": "J"},
        ),
    ]
    return {challenge.key: challenge for challenge in challenges}


def _sort_key(key: str) -> tuple[int, int]:
    level, number = key.split(".", 1)
    return int(level), int(number)


def available_challenges(level: Optional[int] = None) -> List[str]:
    """List challenge keys in level order, optionally for a single level."""
    keys = sorted(_challenge_table(), key=_sort_key)
    if level is None:
        return keys
    return [key for key in keys if _sort_key(key)[0] == level]


def get_challenge(key: str) -> Challenge:
    """
    Resolve a challenge by key.

    Raises
    ------
    UnknownChallengeError
        If `key` is not registered.
    """
    table = _challenge_table()
    if key not in table:
        raise UnknownChallengeError(key, available_challenges())
    return table[key]


def challenges_by_level() -> Dict[int, List[Challenge]]:
    """Challenges grouped by level, each group in key order."""
    grouped: Dict[int, List[Challenge]] = {}
    for key in available_challenges():
        challenge = get_challenge(key)
        grouped.setdefault(challenge.level, []).append(challenge)
    return grouped


__all__ = ["available_challenges", "get_challenge", "challenges_by_level"]
