"""
Result records for the aggregate-metrics computation.

Immutable pydantic models with fixed fields. Both the in-memory computation
(`src.metrics`) and the SQL solutions for the metric challenges assemble these
records, so callers never deal with ad-hoc attributes bolted onto ORM rows.
"""
from __future__ import annotations

from typing import Hashable, List, Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["creator", "commenter"]

# Ids are copied from the input objects as-is: ORM integers, or any hashable key.
RecordId = Hashable

_FROZEN = {"frozen": True, "populate_by_name": True}


class UserMetrics(BaseModel):
    """
    Per-user aggregate metrics.
    """

    user_id: RecordId = Field(..., description="Primary key of the user.")
    name: str = Field(..., description="Display name.")
    email: str = Field(..., description="Unique email.")
    posts_count: int = Field(0, ge=0, description="Posts authored by the user.")
    comments_made: int = Field(0, ge=0, description="Comments authored by the user.")
    comments_received: int = Field(
        0, ge=0, description="Comments attached to the user's posts."
    )
    avg_comments_per_post: float = Field(
        0.0, ge=0, description="comments_received / posts_count, 0 without posts."
    )
    activity_score: int = Field(0, ge=0, description="posts_count + comments_made.")
    engagement_score: int = Field(0, ge=0, description="posts_count * 2 + comments_made.")

    model_config = _FROZEN

    @property
    def role(self) -> Optional[Role]:
        """'creator', 'commenter', or None when the two counts are equal."""
        if self.posts_count > self.comments_made:
            return "creator"
        if self.comments_made > self.posts_count:
            return "commenter"
        return None


class PostMetrics(BaseModel):
    """
    Per-post comment and tag counts.
    """

    post_id: RecordId
    title: str
    comment_count: int = Field(0, ge=0)
    tag_count: int = Field(0, ge=0)
    comment_tag_ratio: float = Field(0.0, ge=0, description="0 for untagged posts.")

    model_config = _FROZEN


class TagUsage(BaseModel):
    """
    How many distinct posts carry a tag.
    """

    tag_id: RecordId
    name: str
    usage_count: int = Field(0, ge=0)

    model_config = _FROZEN

    @property
    def shared(self) -> bool:
        return self.usage_count > 1


class AudienceSplit(BaseModel):
    """Users bucketed into creators and commenters; ties land in neither."""

    creators: List[UserMetrics] = Field(default_factory=list)
    commenters: List[UserMetrics] = Field(default_factory=list)

    model_config = _FROZEN

    def as_dict(self) -> dict[str, List[UserMetrics]]:
        return {"creator": list(self.creators), "commenter": list(self.commenters)}


class MetricsReport(BaseModel):
    """Every metric family computed from one snapshot."""

    users: List[UserMetrics] = Field(default_factory=list)
    posts: List[PostMetrics] = Field(default_factory=list)
    tags: List[TagUsage] = Field(default_factory=list)
    audience: AudienceSplit = Field(default_factory=AudienceSplit)
    most_active: Optional[UserMetrics] = None

    model_config = _FROZEN


__all__ = [
    "Role",
    "UserMetrics",
    "PostMetrics",
    "TagUsage",
    "AudienceSplit",
    "MetricsReport",
]
