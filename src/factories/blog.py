"""
Facade that owns one builder per entity, the fake-data source and the session.

    factory = BlogFactory(session)
    john = factory.users.create("john_doe")
    post = factory.posts.create("ruby_post", "with_tags", author=john, tags_count=3)
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from src.config import get_settings
from src.factories import scenarios
from src.factories.builders import (
    CommentBuilder,
    PostBuilder,
    PostTagBuilder,
    TagBuilder,
    UserBuilder,
)
from src.factories.fake import FakeData


class BlogFactory:
    def __init__(self, session: Optional[Session] = None, seed: Optional[int] = None) -> None:
        self.session = session
        self.fake = FakeData(get_settings().factory_seed if seed is None else seed)
        self.users = UserBuilder(self)
        self.posts = PostBuilder(self)
        self.comments = CommentBuilder(self)
        self.tags = TagBuilder(self)
        self.post_tags = PostTagBuilder(self)

    def require_session(self) -> Session:
        if self.session is None:
            raise RuntimeError(
                "BlogFactory has no session; pass one to create or persist records"
            )
        return self.session

    # --- scenarios ---

    def blog_ecosystem(self) -> "scenarios.BlogEcosystem":
        return scenarios.blog_ecosystem(self)

    def discussion_thread(self, **options: Any) -> "scenarios.DiscussionThread":
        return scenarios.discussion_thread(self, **options)

    def bulk_data(self, **options: Any) -> "scenarios.BulkDataSummary":
        return scenarios.bulk_data(self, **options)


__all__ = ["BlogFactory"]
