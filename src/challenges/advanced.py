"""
Levels 6 and 7: anti-joins, tag combinations, self-referencing conditions and
derived scores.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import Float, Row, case, cast, distinct, func, select
from sqlalchemy.orm import Session

from src.domain.models import Comment, Post, PostTag, Tag, User
from src.domain.records import PostMetrics

# ================== LEVEL 6: ADVANCED QUERIES ==================


def posts_with_tags_without_comments(session: Session) -> List[Post]:
    """6.1 Posts carrying at least one tag and no comments."""
    stmt = (
        select(Post)
        .join(Post.tags)
        .outerjoin(Post.comments)
        .where(Comment.id.is_(None))
        .distinct()
        .order_by(Post.id)
    )
    return list(session.scalars(stmt))


def users_by_comments_received(session: Session) -> List[Row]:
    """6.2 Authors ranked by comments on their posts, as `total_comments`."""
    total = func.count(Comment.id).label("total_comments")
    stmt = (
        select(User, total)
        .join(User.posts)
        .join(Post.comments)
        .group_by(User.id)
        .order_by(total.desc(), User.id)
    )
    return list(session.execute(stmt))


def tags_used_by_multiple_posts(session: Session) -> List[Tag]:
    """6.3 Tags attached to more than one post."""
    stmt = (
        select(Tag)
        .join(Tag.posts)
        .group_by(Tag.id)
        .having(func.count(distinct(Post.id)) > 1)
        .order_by(Tag.id)
    )
    return list(session.scalars(stmt))


def posts_tagged_with_all(session: Session, names: Sequence[str]) -> List[Post]:
    """6.4 Posts carrying every tag in `names`."""
    wanted = set(names)
    stmt = (
        select(Post)
        .join(Post.tags)
        .where(Tag.name.in_(sorted(wanted)))
        .group_by(Post.id)
        .having(func.count(distinct(Tag.id)) == len(wanted))
        .order_by(Post.id)
    )
    return list(session.scalars(stmt))


# ================== LEVEL 7: EXPERT QUERIES ==================


def users_commenting_on_others(session: Session) -> List[User]:
    """7.1 Users who commented on a post somebody else wrote."""
    stmt = (
        select(User)
        .join(User.comments)
        .join(Comment.post)
        .where(Post.user_id != User.id)
        .distinct()
        .order_by(User.id)
    )
    return list(session.scalars(stmt))


def most_active_user(session: Session) -> Optional[Row]:
    """7.2 The user with the most posts + comments, as `activity_score`.

    Ties go to the lowest user id.
    """
    score = (func.count(distinct(Post.id)) + func.count(distinct(Comment.id))).label(
        "activity_score"
    )
    stmt = (
        select(User, score)
        .outerjoin(User.posts)
        .outerjoin(User.comments)
        .group_by(User.id)
        .order_by(score.desc(), User.id)
        .limit(1)
    )
    return session.execute(stmt).first()


def posts_with_comment_tag_ratio(session: Session) -> List[PostMetrics]:
    """7.3 Comment count over tag count per post; 0 for untagged posts."""
    comment_count = func.count(distinct(Comment.id))
    tag_count = func.count(distinct(PostTag.tag_id))
    ratio = case((tag_count == 0, 0.0), else_=cast(comment_count, Float) / tag_count)
    stmt = (
        select(
            Post.id,
            Post.title,
            comment_count.label("comment_count"),
            tag_count.label("tag_count"),
            ratio.label("comment_tag_ratio"),
        )
        .outerjoin(Post.comments)
        .outerjoin(Post.tag_links)
        .group_by(Post.id, Post.title)
        .order_by(Post.id)
    )
    return [
        PostMetrics(
            post_id=row.id,
            title=row.title,
            comment_count=row.comment_count,
            tag_count=row.tag_count,
            comment_tag_ratio=float(row.comment_tag_ratio or 0.0),
        )
        for row in session.execute(stmt)
    ]


def users_with_engagement(session: Session) -> List[Row]:
    """7.4 Users with `posts_count`, `comments_count` and `engagement_score`.

    engagement_score = posts * 2 + comments
    """
    posts_count = func.count(distinct(Post.id))
    comments_count = func.count(distinct(Comment.id))
    stmt = (
        select(
            User,
            posts_count.label("posts_count"),
            comments_count.label("comments_count"),
            (posts_count * 2 + comments_count).label("engagement_score"),
        )
        .outerjoin(User.posts)
        .outerjoin(User.comments)
        .group_by(User.id)
        .order_by(User.id)
    )
    return list(session.execute(stmt))


__all__ = [
    "posts_with_tags_without_comments",
    "users_by_comments_received",
    "tags_used_by_multiple_posts",
    "posts_tagged_with_all",
    "users_commenting_on_others",
    "most_active_user",
    "posts_with_comment_tag_ratio",
    "users_with_engagement",
]
