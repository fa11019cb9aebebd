"""
Domain models for the Blog Query Challenges.

SQLAlchemy 2.0 declarative mapping of the blog schema: users, posts, comments,
tags and the explicit `post_tags` join entity. The `Post.tags` / `Tag.posts`
collections are read-only views over `PostTag`; associations are created as
`PostTag` rows (see `src.domain.integrity.tag_post`).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Timezone-aware current time used for every `created_at` default."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    """A blog member. Owns posts and comments."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    posts: Mapped[List["Post"]] = relationship(back_populates="author", order_by="Post.id")
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="author", order_by="Comment.id"
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r})"


class Post(Base):
    """A blog post written by exactly one user."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    author: Mapped[User] = relationship(back_populates="posts")
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="post", order_by="Comment.id"
    )
    tag_links: Mapped[List["PostTag"]] = relationship(
        back_populates="post", order_by="PostTag.id"
    )
    tags: Mapped[List["Tag"]] = relationship(
        secondary="post_tags", viewonly=True, order_by="Tag.id"
    )

    def __repr__(self) -> str:
        return f"Post(id={self.id!r}, title={self.title!r})"


class Comment(Base):
    """A comment on a post; its author need not be the post's author."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    post: Mapped[Post] = relationship(back_populates="comments")
    author: Mapped[User] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"Comment(id={self.id!r}, post_id={self.post_id!r}, user_id={self.user_id!r})"


class Tag(Base):
    """A uniquely named label shared across posts."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    post_links: Mapped[List["PostTag"]] = relationship(
        back_populates="tag", order_by="PostTag.id"
    )
    posts: Mapped[List[Post]] = relationship(
        secondary="post_tags", viewonly=True, order_by="Post.id"
    )

    def __repr__(self) -> str:
        return f"Tag(id={self.id!r}, name={self.name!r})"


class PostTag(Base):
    """Join record linking one post and one tag; each pair appears once."""

    __tablename__ = "post_tags"
    __table_args__ = (UniqueConstraint("post_id", "tag_id", name="uq_post_tags_post_tag"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), nullable=False, index=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    post: Mapped[Post] = relationship(back_populates="tag_links")
    tag: Mapped[Tag] = relationship(back_populates="post_links")

    def __repr__(self) -> str:
        return f"PostTag(post_id={self.post_id!r}, tag_id={self.tag_id!r})"


# Deletion order for reseeding: children before parents.
DELETE_ORDER = (PostTag, Comment, Post, Tag, User)


__all__ = ["Base", "User", "Post", "Comment", "Tag", "PostTag", "DELETE_ORDER", "utcnow"]
