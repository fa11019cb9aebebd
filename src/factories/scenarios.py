"""
Multi-entity scenarios built on top of the entity builders.

Each scenario needs a session-backed `BlogFactory` and returns a small
dataclass with the records (or ids) it created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from sqlalchemy import insert
from sqlalchemy.orm import Session

from src.domain.integrity import tag_post_many
from src.domain.models import Comment, Post, Tag, User
from src.factories.sequences import generate
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.factories.blog import BlogFactory

log = get_logger(__name__)

PROGRAMMING_TAGS = ("Ruby", "Rails", "JavaScript", "React", "Python")


@dataclass
class BlogEcosystem:
    admin: User
    writers: List[User]
    commenters: List[User]
    programming_tags: List[Tag]
    featured_posts: List[Post]


@dataclass
class DiscussionThread:
    users: List[User]
    tags: List[Tag]
    posts: List[Post] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)


@dataclass
class BulkDataSummary:
    user_ids: List[int]
    post_ids: List[int]
    comment_ids: List[int]

    @property
    def counts(self) -> dict:
        return {
            "users": len(self.user_ids),
            "posts": len(self.post_ids),
            "comments": len(self.comment_ids),
        }


def blog_ecosystem(factory: "BlogFactory") -> BlogEcosystem:
    """
    An admin with three popular featured posts, three writers with posts,
    five active commenters and the five programming-language tags.
    """
    session = factory.require_session()
    admin = factory.users.create(name="Admin User", email="admin@blog.com")
    writers = factory.users.create_list(3, "with_posts")
    commenters = factory.users.create_list(5, "active_commenter")
    programming_tags = [factory.tags.create(name=name) for name in PROGRAMMING_TAGS]

    featured_posts = factory.posts.create_list(3, "popular", author=admin)
    for post in featured_posts:
        tag_post_many(session, post, factory.fake.sample(programming_tags, 2))

    log.info(
        "Blog ecosystem created",
        extra={
            "writers": len(writers),
            "commenters": len(commenters),
            "featured_posts": len(featured_posts),
        },
    )
    return BlogEcosystem(admin, writers, commenters, programming_tags, featured_posts)


def discussion_thread(
    factory: "BlogFactory",
    users_count: int = 3,
    posts_per_user: int = 2,
    comments_per_post: int = 3,
    tags_pool: int = 5,
) -> DiscussionThread:
    """
    Users who comment on each other's posts.

    Every post gets 1-3 tags from a shared pool and `comments_per_post`
    comments, all written by one other user picked at random.
    """
    if comments_per_post > 0 and users_count < 2:
        raise ValueError("discussion_thread needs at least two users to comment on posts")

    session = factory.require_session()
    fake = factory.fake
    thread = DiscussionThread(
        users=factory.users.create_list(users_count),
        tags=factory.tags.create_list(tags_pool),
    )

    for user in thread.users:
        others = [candidate for candidate in thread.users if candidate is not user]
        for post in factory.posts.create_list(posts_per_user, author=user):
            thread.posts.append(post)
            if thread.tags:
                picked = fake.sample(thread.tags, min(fake.randint(1, 3), len(thread.tags)))
                tag_post_many(session, post, picked)
            if comments_per_post > 0:
                commenter = fake.choice(others)
                thread.comments.extend(
                    factory.comments.create_list(comments_per_post, post=post, author=commenter)
                )

    return thread


def _bulk_insert(session: Session, model: type, rows: List[dict]) -> List[int]:
    if not rows:
        return []
    return list(session.scalars(insert(model).returning(model.id), rows))


def bulk_data(
    factory: "BlogFactory",
    users_count: int = 100,
    posts_count: int = 500,
    comments_count: int = 1000,
) -> BulkDataSummary:
    """
    Insert lightweight users, posts and comments with three bulk INSERTs.

    Rows skip create-time validation; posts and comments reference randomly
    sampled users and posts from the same batch.
    """
    session = factory.require_session()
    fake = factory.fake

    user_rows = [{"name": "User", "email": generate("email")} for _ in range(users_count)]
    user_ids = _bulk_insert(session, User, user_rows)

    post_rows = [
        {
            "user_id": fake.choice(user_ids),
            "title": fake.sentence(3),
            "content": fake.paragraph(3),
        }
        for _ in range(posts_count if user_ids else 0)
    ]
    post_ids = _bulk_insert(session, Post, post_rows)

    comment_rows = [
        {
            "user_id": fake.choice(user_ids),
            "post_id": fake.choice(post_ids),
            "content": fake.sentence(4),
        }
        for _ in range(comments_count if post_ids else 0)
    ]
    comment_ids = _bulk_insert(session, Comment, comment_rows)

    summary = BulkDataSummary(user_ids, post_ids, comment_ids)
    log.info("Bulk data inserted", extra=summary.counts)
    return summary


__all__ = [
    "BlogEcosystem",
    "DiscussionThread",
    "BulkDataSummary",
    "PROGRAMMING_TAGS",
    "blog_ecosystem",
    "discussion_thread",
    "bulk_data",
]
