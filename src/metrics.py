"""
Aggregate metrics over the blog relations, computed in memory.

Every function is a pure transform over full relation sets: no side effects,
identical output for identical input, output order follows input order, and
rankings break ties by input order. Ratios fall back to 0 when the divisor is
zero.

Inputs are duck-typed: ORM instances from `src.domain.models` work, and so do
any objects exposing the same attribute names (see the protocols below).

Usage:
    from src.metrics import compute_report, load_snapshot

    report = compute_report(load_snapshot(session))
    report.most_active.name
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.models import Comment, Post, PostTag, Tag, User
from src.domain.records import AudienceSplit, MetricsReport, PostMetrics, TagUsage, UserMetrics


class UserLike(Protocol):
    id: Any
    name: str
    email: str


class PostLike(Protocol):
    id: Any
    user_id: Any
    title: str


class CommentLike(Protocol):
    id: Any
    post_id: Any
    user_id: Any


class TagLike(Protocol):
    id: Any
    name: str


class PostTagLike(Protocol):
    post_id: Any
    tag_id: Any


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def compute_user_metrics(
    users: Iterable[UserLike],
    posts: Iterable[PostLike],
    comments: Iterable[CommentLike],
) -> List[UserMetrics]:
    """
    Per-user post/comment counts and the scores derived from them.

    `comments_received` counts comments on posts the user wrote, whoever wrote
    the comment (self-comments included).
    """
    posts = list(posts)
    comments = list(comments)

    posts_by_author: Counter = Counter(post.user_id for post in posts)
    comments_by_author: Counter = Counter(comment.user_id for comment in comments)
    post_author = {post.id: post.user_id for post in posts}
    received: Counter = Counter(
        post_author[comment.post_id] for comment in comments if comment.post_id in post_author
    )

    metrics: List[UserMetrics] = []
    for user in users:
        posts_count = posts_by_author[user.id]
        comments_made = comments_by_author[user.id]
        comments_received = received[user.id]
        metrics.append(
            UserMetrics(
                user_id=user.id,
                name=user.name,
                email=user.email,
                posts_count=posts_count,
                comments_made=comments_made,
                comments_received=comments_received,
                avg_comments_per_post=_ratio(comments_received, posts_count),
                activity_score=posts_count + comments_made,
                engagement_score=posts_count * 2 + comments_made,
            )
        )
    return metrics


def compute_post_metrics(
    posts: Iterable[PostLike],
    comments: Iterable[CommentLike],
    post_tags: Iterable[PostTagLike],
) -> List[PostMetrics]:
    """Per-post comment count, distinct tag count and comment/tag ratio."""
    comment_counts: Counter = Counter(comment.post_id for comment in comments)
    tags_per_post: Dict[Any, Set[Any]] = defaultdict(set)
    for link in post_tags:
        tags_per_post[link.post_id].add(link.tag_id)

    metrics: List[PostMetrics] = []
    for post in posts:
        comment_count = comment_counts[post.id]
        tag_count = len(tags_per_post.get(post.id, ()))
        metrics.append(
            PostMetrics(
                post_id=post.id,
                title=post.title,
                comment_count=comment_count,
                tag_count=tag_count,
                comment_tag_ratio=_ratio(comment_count, tag_count),
            )
        )
    return metrics


def compute_tag_usage(
    tags: Iterable[TagLike], post_tags: Iterable[PostTagLike]
) -> List[TagUsage]:
    """Number of distinct posts carrying each tag."""
    posts_per_tag: Dict[Any, Set[Any]] = defaultdict(set)
    for link in post_tags:
        posts_per_tag[link.tag_id].add(link.post_id)
    return [
        TagUsage(tag_id=tag.id, name=tag.name, usage_count=len(posts_per_tag.get(tag.id, ())))
        for tag in tags
    ]


def shared_tags(tags: Iterable[TagLike], post_tags: Iterable[PostTagLike]) -> List[TagUsage]:
    """Tags used by more than one post."""
    return [usage for usage in compute_tag_usage(tags, post_tags) if usage.shared]


def classify_users(metrics: Iterable[UserMetrics]) -> AudienceSplit:
    """Split users into creators and commenters; equal counts go nowhere."""
    creators: List[UserMetrics] = []
    commenters: List[UserMetrics] = []
    for entry in metrics:
        if entry.role == "creator":
            creators.append(entry)
        elif entry.role == "commenter":
            commenters.append(entry)
    return AudienceSplit(creators=creators, commenters=commenters)


def most_active_user(metrics: Sequence[UserMetrics]) -> Optional[UserMetrics]:
    """Highest activity score; the earliest user wins a tie."""
    if not metrics:
        return None
    # max() keeps the first maximal element.
    return max(metrics, key=lambda entry: entry.activity_score)


def rank_by_engagement(metrics: Iterable[UserMetrics]) -> List[UserMetrics]:
    """Users by engagement score, descending; stable for equal scores."""
    return sorted(metrics, key=lambda entry: entry.engagement_score, reverse=True)


@dataclass(frozen=True)
class BlogSnapshot:
    """
    Full relation sets the metrics are computed from.
    """

    users: Sequence[UserLike] = field(default_factory=tuple)
    posts: Sequence[PostLike] = field(default_factory=tuple)
    comments: Sequence[CommentLike] = field(default_factory=tuple)
    tags: Sequence[TagLike] = field(default_factory=tuple)
    post_tags: Sequence[PostTagLike] = field(default_factory=tuple)


def load_snapshot(session: Session) -> BlogSnapshot:
    """Read every relation in primary-key order."""
    return BlogSnapshot(
        users=tuple(session.scalars(select(User).order_by(User.id))),
        posts=tuple(session.scalars(select(Post).order_by(Post.id))),
        comments=tuple(session.scalars(select(Comment).order_by(Comment.id))),
        tags=tuple(session.scalars(select(Tag).order_by(Tag.id))),
        post_tags=tuple(session.scalars(select(PostTag).order_by(PostTag.id))),
    )


def compute_report(snapshot: BlogSnapshot) -> MetricsReport:
    """Every metric family for one snapshot."""
    users = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    return MetricsReport(
        users=users,
        posts=compute_post_metrics(snapshot.posts, snapshot.comments, snapshot.post_tags),
        tags=compute_tag_usage(snapshot.tags, snapshot.post_tags),
        audience=classify_users(users),
        most_active=most_active_user(users),
    )


__all__ = [
    "BlogSnapshot",
    "load_snapshot",
    "compute_user_metrics",
    "compute_post_metrics",
    "compute_tag_usage",
    "shared_tags",
    "classify_users",
    "most_active_user",
    "rank_by_engagement",
    "compute_report",
]
