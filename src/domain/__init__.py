"""
Domain package for the Blog Query Challenges.

Exports the ORM schema, the metric result records and the create-time
integrity helpers. Keep this package focused on data definitions and
validation concerns.
"""

from src.domain.integrity import persist, persist_all, tag_post, tag_post_many, validate_new
from src.domain.models import DELETE_ORDER, Base, Comment, Post, PostTag, Tag, User
from src.domain.records import (
    AudienceSplit,
    MetricsReport,
    PostMetrics,
    TagUsage,
    UserMetrics,
)

__all__ = [
    # Schema
    "Base",
    "User",
    "Post",
    "Comment",
    "Tag",
    "PostTag",
    "DELETE_ORDER",
    # Records
    "UserMetrics",
    "PostMetrics",
    "TagUsage",
    "AudienceSplit",
    "MetricsReport",
    # Integrity
    "validate_new",
    "persist",
    "persist_all",
    "tag_post",
    "tag_post_many",
]
