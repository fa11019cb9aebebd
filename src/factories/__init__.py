"""
Test-data builders for the blog schema.

`BlogFactory` is the entry point; it exposes one builder per entity
(`users`, `posts`, `comments`, `tags`, `post_tags`) and the multi-entity
scenarios.
"""

from src.factories.base import BUILD, CREATE, STUB, Association, BuildConfig, Builder, Lazy
from src.factories.blog import BlogFactory
from src.factories.fake import FakeData
from src.factories.scenarios import BlogEcosystem, BulkDataSummary, DiscussionThread
from src.factories.sequences import generate, reset_sequences

__all__ = [
    "BlogFactory",
    "Builder",
    "BuildConfig",
    "Lazy",
    "Association",
    "BUILD",
    "CREATE",
    "STUB",
    "FakeData",
    "BlogEcosystem",
    "DiscussionThread",
    "BulkDataSummary",
    "generate",
    "reset_sequences",
]
