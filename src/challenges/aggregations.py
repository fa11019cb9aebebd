"""
Levels 4 and 5: aggregations, grouping, HAVING and string aggregation.

Solutions that attach a computed column return SQLAlchemy rows, so the entity
and the aggregate are read as `row.User` / `row.post_count`.
"""

from __future__ import annotations

from typing import Dict, List

from sqlalchemy import Row, func, select
from sqlalchemy.orm import Session

from src.domain.models import Comment, Post, Tag, User

# ================== LEVEL 4: AGGREGATIONS & GROUPING ==================


def post_counts_by_user(session: Session) -> Dict[int, int]:
    """4.1 {user_id: post_count} for every user with posts."""
    stmt = select(Post.user_id, func.count(Post.id)).group_by(Post.user_id)
    return {user_id: count for user_id, count in session.execute(stmt)}


def users_with_post_count(session: Session) -> List[Row]:
    """4.2 Every user with a `post_count` column (0 for non-authors)."""
    stmt = (
        select(User, func.count(Post.id).label("post_count"))
        .outerjoin(User.posts)
        .group_by(User.id)
        .order_by(User.id)
    )
    return list(session.execute(stmt))


def posts_with_comment_count(session: Session) -> List[Row]:
    """4.3 Every post with a `comment_count` column."""
    stmt = (
        select(Post, func.count(Comment.id).label("comment_count"))
        .outerjoin(Post.comments)
        .group_by(Post.id)
        .order_by(Post.id)
    )
    return list(session.execute(stmt))


def average_comments_per_post(session: Session) -> float:
    """4.4 Comments divided by posts; 0.0 when there are no posts."""
    comments = session.scalar(select(func.count()).select_from(Comment)) or 0
    posts = session.scalar(select(func.count()).select_from(Post)) or 0
    return comments / posts if posts else 0.0


# ================== LEVEL 5: COMPLEX QUERIES ==================


def users_with_posts_and_comments(session: Session) -> List[User]:
    """5.1 Users who wrote at least one post and at least one comment."""
    stmt = select(User).join(User.posts).join(User.comments).distinct().order_by(User.id)
    return list(session.scalars(stmt))


def posts_with_more_comments_than(session: Session, threshold: int = 1) -> List[Post]:
    """5.2 Posts with more than `threshold` comments."""
    stmt = (
        select(Post)
        .join(Post.comments)
        .group_by(Post.id)
        .having(func.count(Comment.id) > threshold)
        .order_by(Post.id)
    )
    return list(session.scalars(stmt))


def users_by_post_count(session: Session) -> List[Row]:
    """5.3 Users ordered by post count, most prolific first."""
    post_count = func.count(Post.id).label("post_count")
    stmt = (
        select(User, post_count)
        .outerjoin(User.posts)
        .group_by(User.id)
        .order_by(post_count.desc(), User.id)
    )
    return list(session.execute(stmt))


def posts_with_tag_names(session: Session, separator: str = ", ") -> List[Row]:
    """5.4 Every post with its tag names joined into `tag_names` (None if untagged)."""
    stmt = (
        select(Post, func.aggregate_strings(Tag.name, separator).label("tag_names"))
        .outerjoin(Post.tags)
        .group_by(Post.id)
        .order_by(Post.id)
    )
    return list(session.execute(stmt))


__all__ = [
    "post_counts_by_user",
    "users_with_post_count",
    "posts_with_comment_count",
    "average_comments_per_post",
    "users_with_posts_and_comments",
    "posts_with_more_comments_than",
    "users_by_post_count",
    "posts_with_tag_names",
]
