"""
Level 8: time windows, multi-query statistics and multi-condition search.

The statistics solutions assemble `UserMetrics` records from two grouped
queries instead of bolting computed attributes onto fetched users; the field
semantics match `src.metrics.compute_user_metrics`.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Row, distinct, func, or_, select
from sqlalchemy.orm import Session

from src.domain.models import Comment, Post, Tag, User, utcnow
from src.domain.records import AudienceSplit, UserMetrics
from src.metrics import classify_users


def trending_posts(
    session: Session, hours: int = 24, now: Optional[datetime] = None
) -> List[Row]:
    """8.1 Posts commented on in the last `hours` hours, busiest first.

    Each row carries `recent_comment_count`.
    """
    until = now or utcnow()
    since = until - timedelta(hours=hours)
    recent = func.count(Comment.id).label("recent_comment_count")
    stmt = (
        select(Post, recent)
        .join(Post.comments)
        .where(Comment.created_at.between(since, until))
        .group_by(Post.id)
        .order_by(recent.desc(), Post.id)
    )
    return list(session.execute(stmt))


def _comments_received_by_author(session: Session) -> Dict[int, int]:
    stmt = (
        select(Post.user_id, func.count(Comment.id))
        .join(Post.comments)
        .group_by(Post.user_id)
    )
    return {user_id: count for user_id, count in session.execute(stmt)}


def user_statistics(session: Session) -> List[UserMetrics]:
    """8.2 Posts, comments made, comments received and average per post."""
    posts_count = func.count(distinct(Post.id)).label("posts_count")
    comments_made = func.count(distinct(Comment.id)).label("comments_made")
    stmt = (
        select(User.id, User.name, User.email, posts_count, comments_made)
        .outerjoin(User.posts)
        .outerjoin(User.comments)
        .group_by(User.id, User.name, User.email)
        .order_by(User.id)
    )
    received = _comments_received_by_author(session)

    stats: List[UserMetrics] = []
    for row in session.execute(stmt):
        comments_received = received.get(row.id, 0)
        stats.append(
            UserMetrics(
                user_id=row.id,
                name=row.name,
                email=row.email,
                posts_count=row.posts_count,
                comments_made=row.comments_made,
                comments_received=comments_received,
                avg_comments_per_post=(
                    comments_received / row.posts_count if row.posts_count > 0 else 0.0
                ),
                activity_score=row.posts_count + row.comments_made,
                engagement_score=row.posts_count * 2 + row.comments_made,
            )
        )
    return stats


def creators_and_commenters(session: Session) -> AudienceSplit:
    """8.3 Users with more posts than comments vs more comments than posts."""
    return classify_users(user_statistics(session))


def advanced_search(
    session: Session,
    title_terms: Sequence[str],
    tag: str,
    author_prefix: str,
) -> List[Post]:
    """8.4 Posts matching every condition:

    - title contains any of `title_terms` (case-insensitive)
    - at least one comment
    - tagged `tag`
    - author name starts with `author_prefix`
    """
    stmt = (
        select(Post)
        .join(Post.comments)
        .join(Post.tags)
        .join(Post.author)
        .where(
            or_(*(Post.title.ilike(f"%{term}%") for term in title_terms)),
            Tag.name == tag,
            User.name.ilike(f"{author_prefix}%"),
        )
        .distinct()
        .order_by(Post.id)
    )
    return list(session.scalars(stmt))


__all__ = [
    "trending_posts",
    "user_statistics",
    "creators_and_commenters",
    "advanced_search",
]
