"""
Levels 1 and 2: basic lookups, ordering, counting and filtering.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.domain.models import Post, User, utcnow

# ================== LEVEL 1: BASIC QUERIES ==================


def all_users(session: Session) -> List[User]:
    """1.1 Find all users."""
    return list(session.scalars(select(User).order_by(User.id)))


def user_by_email(session: Session, email: str) -> Optional[User]:
    """1.2 Find a user by email."""
    return session.scalars(select(User).where(User.email == email)).one_or_none()


def posts_ordered_by_title(session: Session) -> List[Post]:
    """1.3 All posts ordered alphabetically by title."""
    return list(session.scalars(select(Post).order_by(Post.title, Post.id)))


def count_posts(session: Session) -> int:
    """1.4 Count all posts."""
    return session.scalar(select(func.count()).select_from(Post)) or 0


# ================== LEVEL 2: FILTERING & CONDITIONS ==================


def posts_by_author(session: Session, email: str) -> List[Post]:
    """2.1 Posts written by the user with `email`."""
    stmt = select(Post).join(Post.author).where(User.email == email).order_by(Post.id)
    return list(session.scalars(stmt))


def posts_with_title_containing(session: Session, fragment: str) -> List[Post]:
    """2.2 Posts whose title contains `fragment`, case-insensitively."""
    stmt = select(Post).where(Post.title.ilike(f"%{fragment}%")).order_by(Post.id)
    return list(session.scalars(stmt))


def users_with_name_prefix(session: Session, prefix: str) -> List[User]:
    """2.3 Users whose name starts with `prefix`."""
    stmt = select(User).where(User.name.ilike(f"{prefix}%")).order_by(User.id)
    return list(session.scalars(stmt))


def posts_created_within(
    session: Session, hours: int = 24, now: Optional[datetime] = None
) -> List[Post]:
    """2.4 Posts created in the last `hours` hours."""
    until = now or utcnow()
    since = until - timedelta(hours=hours)
    stmt = select(Post).where(Post.created_at.between(since, until)).order_by(Post.id)
    return list(session.scalars(stmt))


__all__ = [
    "all_users",
    "user_by_email",
    "posts_ordered_by_title",
    "count_posts",
    "posts_by_author",
    "posts_with_title_containing",
    "users_with_name_prefix",
    "posts_created_within",
]
