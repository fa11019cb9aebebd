"""
Seed datasets for the blog schema.

Two datasets are available:

- `blog`: a realistic demo blog (8 users, 24 tags, 12 posts, 24 comments)
  used for exploring the challenges by hand.
- `challenge`: the small canonical fixture every challenge expectation is
  written against (3 users, 5 tags, 5 posts, 5 comments).

Both go through `persist()`, so they obey the same create-time integrity
rules as the builders.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from src.domain.integrity import persist, tag_post
from src.domain.models import DELETE_ORDER, Comment, Post, PostTag, Tag, User
from src.utils.logging import get_logger

log = get_logger(__name__)

# ================== BLOG DATASET ==================

BLOG_USERS: List[Tuple[str, str]] = [
    ("Alice Johnson", "alice@example.com"),
    ("Bob Smith", "bob@example.com"),
    ("Charlie Brown", "charlie@example.com"),
    ("Diana Wilson", "diana@example.com"),
    ("Emma Davis", "emma@example.com"),
    ("Frank Miller", "frank@example.com"),
    ("Grace Lee", "grace@example.com"),
    ("Henry Taylor", "henry@example.com"),
]

BLOG_TAGS: List[str] = [
    "Ruby", "Rails", "JavaScript", "Python", "React", "Vue.js", "Node.js",
    "API", "Frontend", "Backend", "Database", "PostgreSQL", "MySQL",
    "DevOps", "Docker", "AWS", "Tutorial", "Best Practices", "Performance",
    "Security", "Testing", "Deployment", "Mobile", "Web Development",
]

# (title, content, author index, tag names). Tag names missing from BLOG_TAGS
# are skipped at load time.
BLOG_POSTS: List[Tuple[str, str, int, List[str]]] = [
    (
        "Getting Started with Ruby on Rails",
        "Ruby on Rails is a powerful web application framework that makes it easy to build "
        "robust applications quickly. In this post, we'll explore the basics of Rails and why "
        "it's such a popular choice for web development.",
        0,
        ["Ruby", "Rails", "Tutorial"],
    ),
    (
        "Building RESTful APIs with Rails",
        "RESTful APIs are the backbone of modern web applications. We'll cover everything "
        "from basic routing to serialization, authentication and error handling.",
        1,
        ["Rails", "API", "Backend"],
    ),
    (
        "Database Optimization in Rails",
        "Database performance is crucial for any web application. We'll cover N+1 queries, "
        "eager loading, indexing strategies and tools to identify bottlenecks.",
        2,
        ["Rails", "Database", "Performance", "PostgreSQL"],
    ),
    (
        "Frontend Development with React and Rails",
        "Combining React with Rails creates a powerful full-stack development experience, "
        "from a Rails API backend to a React frontend sharing authentication and state.",
        0,
        ["React", "Rails", "Frontend", "JavaScript"],
    ),
    (
        "Testing Best Practices in Rails",
        "Testing is an essential part of software development. We'll explore unit, "
        "integration and system tests, and how to write maintainable test suites.",
        3,
        ["Rails", "Testing", "Best Practices"],
    ),
    (
        "Deploying Rails Applications to Production",
        "Taking an application to production involves deployment strategies, environment "
        "configuration, database migrations, asset compilation and monitoring.",
        4,
        ["Rails", "Deployment", "DevOps", "AWS"],
    ),
    (
        "Understanding Active Record Associations",
        "Associations are one of the most powerful features of an ORM. We'll explore "
        "one-to-many, one-to-one and many-to-many relationships.",
        1,
        ["Rails", "Database", "Tutorial"],
    ),
    (
        "Security Best Practices for Rails Applications",
        "Security should be a top priority in any web application. We'll discuss "
        "authentication, authorization, SQL injection prevention and XSS protection.",
        5,
        ["Rails", "Security", "Best Practices"],
    ),
    (
        "Performance Monitoring and Optimization",
        "Monitoring performance is crucial for a good user experience. We'll explore tools "
        "for identifying bottlenecks and optimizing for speed and efficiency.",
        2,
        ["Rails", "Performance", "Monitoring"],
    ),
    (
        "Building Real-time Features with Action Cable",
        "WebSockets bring real-time functionality to web applications. We'll build a chat "
        "application with channels, connections and broadcasts.",
        6,
        ["Rails", "WebSocket", "Real-time"],
    ),
    (
        "Microservices Architecture with Rails",
        "As applications grow you might break them into microservices. This post covers "
        "service communication, data consistency and deployment strategies.",
        3,
        ["Rails", "Microservices", "Architecture"],
    ),
    (
        "Advanced Rails Console Tips and Tricks",
        "The console is a powerful tool for debugging and exploring an application. Here are "
        "custom helpers, debugging techniques and productivity shortcuts.",
        7,
        ["Rails", "Console", "Debugging"],
    ),
]

# (content, post index, author index)
BLOG_COMMENTS: List[Tuple[str, int, int]] = [
    ("Great introduction to Rails! This really helped me understand the basics.", 0, 1),
    ("Thanks for sharing this. Convention over configuration is what I love most.", 0, 2),
    ("Excellent guide on RESTful APIs. The examples are very clear and easy to follow.", 1, 0),
    ("I've been struggling with API design and this post really clarified things.", 1, 3),
    ("The database optimization tips are gold! My app is running much faster now.", 2, 4),
    ("N+1 queries were killing my app's performance. This post saved me!", 2, 1),
    ("React + Rails is such a powerful combination. Thanks for the tutorial!", 3, 5),
    ("I was looking for exactly this kind of setup. The auth part was helpful.", 3, 2),
    ("Testing has always been intimidating, but this post makes it approachable.", 4, 6),
    ("TDD changed my development workflow completely. Great explanation.", 4, 0),
    ("Deployment can be tricky, but this guide covers all the important aspects.", 5, 7),
    ("The environment configuration section was exactly what I needed. Thanks!", 5, 1),
    ("Associations are so powerful once you understand them properly.", 6, 3),
    ("The polymorphic associations example really cleared up my confusion.", 6, 4),
    ("Security is so important and often overlooked. Great comprehensive guide!", 7, 2),
    ("The XSS protection tips are particularly valuable. Thanks for sharing!", 7, 5),
    ("Performance monitoring is crucial for production apps. Great tools!", 8, 6),
    ("I implemented some of these optimizations and saw immediate improvements.", 8, 0),
    ("Real-time features are amazing. The chat example is perfect!", 9, 7),
    ("WebSockets were confusing to me before, but this tutorial makes it clear.", 9, 1),
    ("Microservices architecture is complex, but this post breaks it down well.", 10, 4),
    ("The service communication patterns are really useful. Thanks!", 10, 3),
    ("I learn so much from these console tips! Debugging is much faster now.", 11, 5),
    ("The custom helpers section is genius. I'm implementing these right away.", 11, 2),
]

# ================== CHALLENGE FIXTURE ==================

FIXTURE_USERS: Dict[str, Tuple[str, str]] = {
    "john": ("John Doe", "john@example.com"),
    "jane": ("Jane Smith", "jane@example.com"),
    "bob": ("Bob Wilson", "bob@example.com"),
}

FIXTURE_TAGS: Dict[str, str] = {
    "ruby": "Ruby",
    "rails": "Rails",
    "javascript": "JavaScript",
    "react": "React",
    "sql": "SQL",
}

FIXTURE_POSTS: Dict[str, Tuple[str, str, str]] = {
    "post1": ("Getting Started with Ruby", "Ruby basics tutorial", "john"),
    "post2": ("Advanced Rails Techniques", "Advanced Rails concepts", "john"),
    "post3": ("JavaScript for Beginners", "JS fundamentals", "jane"),
    "post4": ("React Development", "React components guide", "jane"),
    "post5": ("Database Optimization", "SQL optimization tips", "bob"),
}

FIXTURE_COMMENTS: Dict[str, Tuple[str, str, str]] = {
    "comment1": ("Great tutorial!", "post1", "jane"),
    "comment2": ("Very helpful", "post1", "bob"),
    "comment3": ("Thanks for sharing", "post2", "jane"),
    "comment4": ("Excellent guide", "post3", "john"),
    "comment5": ("Well written", "post4", "john"),
}

FIXTURE_TAGGINGS: Dict[str, List[str]] = {
    "post1": ["ruby", "rails"],
    "post2": ["ruby", "rails"],
    "post3": ["javascript"],
    "post4": ["javascript", "react"],
    "post5": ["sql"],
}


@dataclass
class SeedSummary:
    users: int = 0
    tags: int = 0
    posts: int = 0
    post_tags: int = 0
    comments: int = 0
    skipped_tags: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class ChallengeFixture:
    """Primary keys of the canonical fixture, by key ("john", "post1", ...)."""

    users: Dict[str, int]
    tags: Dict[str, int]
    posts: Dict[str, int]
    comments: Dict[str, int]


def reset_database(session: Session) -> Dict[str, int]:
    """Bulk-delete every blog row, children before parents."""
    deleted: Dict[str, int] = {}
    for model in DELETE_ORDER:
        result = session.execute(delete(model))
        deleted[model.__tablename__] = result.rowcount or 0
    session.flush()
    log.info("Database cleared", extra={"deleted": deleted})
    return deleted


def table_counts(session: Session) -> Dict[str, int]:
    return {
        model.__tablename__: session.scalar(select(func.count()).select_from(model)) or 0
        for model in (User, Post, Comment, Tag, PostTag)
    }


def seed_blog(session: Session, reset: bool = True) -> SeedSummary:
    """
    Load the demo blog dataset.

    Parameters
    ----------
    session:
        Open session; the caller commits.
    reset:
        Clear existing rows first. Without a reset, loading twice fails on the
        unique email and tag-name rules.
    """
    if reset:
        reset_database(session)

    summary = SeedSummary()
    users = [persist(session, User(name=name, email=email)) for name, email in BLOG_USERS]
    summary.users = len(users)

    tags = {name: persist(session, Tag(name=name)) for name in BLOG_TAGS}
    summary.tags = len(tags)

    posts: List[Post] = []
    for title, content, author_index, tag_names in BLOG_POSTS:
        post = persist(session, Post(title=title, content=content, author=users[author_index]))
        posts.append(post)
        for tag_name in tag_names:
            tag = tags.get(tag_name)
            if tag is None:
                log.info("Skipping unknown tag", extra={"post": title, "tag": tag_name})
                summary.skipped_tags.append(tag_name)
                continue
            tag_post(session, post, tag)
            summary.post_tags += 1
    summary.posts = len(posts)

    for content, post_index, author_index in BLOG_COMMENTS:
        comment = Comment(content=content, post=posts[post_index], author=users[author_index])
        persist(session, comment)
        summary.comments += 1

    log.info("Blog dataset seeded", extra=summary.as_dict())
    return summary


DATASETS = ("blog", "challenge")


def load_dataset(session: Session, dataset: str, reset: bool = True) -> Dict[str, int]:
    """
    Load a named dataset and return the resulting row count per table.

    Raises
    ------
    ValueError
        If `dataset` is not one of `DATASETS`.
    """
    if dataset not in DATASETS:
        raise ValueError(f"Unknown dataset '{dataset}'. Choose from: {', '.join(DATASETS)}")
    if dataset == "blog":
        seed_blog(session, reset=reset)
    else:
        if reset:
            reset_database(session)
        seed_challenge_fixture(session)
    return table_counts(session)


def seed_challenge_fixture(session: Session) -> ChallengeFixture:
    """
    Load the canonical challenge fixture into an empty database.

    Returns primary keys rather than instances so callers can query with a
    fresh identity map.
    """
    users = {
        key: persist(session, User(name=name, email=email))
        for key, (name, email) in FIXTURE_USERS.items()
    }
    tags = {key: persist(session, Tag(name=name)) for key, name in FIXTURE_TAGS.items()}
    posts = {
        key: persist(session, Post(title=title, content=content, author=users[author]))
        for key, (title, content, author) in FIXTURE_POSTS.items()
    }
    comments = {
        key: persist(session, Comment(content=content, post=posts[post], author=users[author]))
        for key, (content, post, author) in FIXTURE_COMMENTS.items()
    }
    for post_key, tag_keys in FIXTURE_TAGGINGS.items():
        for tag_key in tag_keys:
            tag_post(session, posts[post_key], tags[tag_key])

    fixture = ChallengeFixture(
        users={key: user.id for key, user in users.items()},
        tags={key: tag.id for key, tag in tags.items()},
        posts={key: post.id for key, post in posts.items()},
        comments={key: comment.id for key, comment in comments.items()},
    )
    log.info("Challenge fixture seeded", extra=table_counts(session))
    return fixture


__all__ = [
    "BLOG_USERS",
    "BLOG_TAGS",
    "BLOG_POSTS",
    "BLOG_COMMENTS",
    "SeedSummary",
    "ChallengeFixture",
    "reset_database",
    "table_counts",
    "seed_blog",
    "seed_challenge_fixture",
    "DATASETS",
    "load_dataset",
]
