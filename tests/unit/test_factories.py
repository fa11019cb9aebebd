from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session

from src.domain.models import Comment, Post, PostTag, User, utcnow
from src.exceptions import DuplicateTagNameError, UnknownPresetError
from src.factories import BlogFactory, generate
from src.factories.scenarios import PROGRAMMING_TAGS
from src.seeding import table_counts

STUB_ID_FLOOR = 1_000_001

# blog_ecosystem: admin + 3 writers + 5 commenters (each adding 2 post authors)
# + one author per comment on the 3 popular posts.
ECOSYSTEM_USERS = 1 + 3 + 5 + 10 + 15
ECOSYSTEM_POSTS = 9 + 10 + 3
ECOSYSTEM_COMMENTS = 25 + 15
ECOSYSTEM_TAGS = 5 + 9
ECOSYSTEM_POST_TAGS = 9 + 6


def _count(session: Session, column, *criteria) -> int:
    return session.scalar(select(func.count(column)).where(*criteria)) or 0


# ================== STRATEGIES ==================


def test_build_returns_unsaved_instances(session: Session, factory: BlogFactory) -> None:
    post = factory.posts.build()

    assert post.id is None
    assert post.author.id is None
    assert post not in session
    assert table_counts(session)["users"] == 0


def test_create_persists_with_primary_keys(session: Session, factory: BlogFactory) -> None:
    john = factory.users.create("john_doe")
    post = factory.posts.create("ruby_post", author=john)

    assert john.id is not None
    assert john.email == "john@example.com"
    assert post.user_id == john.id
    assert post.title == "Getting Started with Ruby"
    assert table_counts(session)["posts"] == 1


def test_stub_assigns_fake_ids_without_database(session: Session, factory: BlogFactory) -> None:
    post = factory.posts.stub()

    assert post.id >= STUB_ID_FLOOR
    assert post.author.id >= STUB_ID_FLOOR
    assert post.user_id == post.author.id
    assert post.created_at is not None
    assert all(count == 0 for count in table_counts(session).values())


def test_stub_works_without_session() -> None:
    factory = BlogFactory(seed=1)
    comment = factory.comments.stub("great_tutorial")

    assert comment.content == "Great tutorial!"
    assert comment.post_id == comment.post.id
    assert comment.user_id == comment.author.id


def test_create_requires_session() -> None:
    factory = BlogFactory(seed=1)
    assert factory.users.build().id is None
    with pytest.raises(RuntimeError, match="no session"):
        factory.users.create()


def test_run_rejects_unknown_strategy(factory: BlogFactory) -> None:
    with pytest.raises(ValueError, match="Unknown strategy"):
        factory.users.run("save")


def test_list_variants(factory: BlogFactory) -> None:
    assert len(factory.tags.build_list(3)) == 3
    assert len(factory.tags.stub_list(2)) == 2
    created = factory.tags.create_list(4)
    assert len({tag.id for tag in created}) == 4


# ================== SEQUENCES & FAKE DATA ==================


def test_sequences_yield_unique_values(factory: BlogFactory) -> None:
    first, second = factory.users.create_list(2)
    assert first.email == "user1@example.com"
    assert second.email == "user2@example.com"
    assert factory.tags.build().name == "Tag1"
    assert factory.posts.build("sequenced_title").title == "Blog Post Title 1"


def test_unknown_sequence_raises() -> None:
    with pytest.raises(KeyError, match="Unknown sequence"):
        generate("phone")


def test_same_seed_produces_same_fake_data() -> None:
    first = BlogFactory(seed=7)
    second = BlogFactory(seed=7)
    assert [u.name for u in first.users.build_list(3)] == [
        u.name for u in second.users.build_list(3)
    ]


def test_overrides_win_over_presets(factory: BlogFactory) -> None:
    user = factory.users.build("john_doe", name="Johnny")
    assert user.name == "Johnny"
    assert user.email == "john@example.com"


def test_unknown_preset_is_a_key_error(factory: BlogFactory) -> None:
    with pytest.raises(UnknownPresetError, match="UserBuilder has no preset 'nope'") as exc:
        factory.users.build("nope")
    assert isinstance(exc.value, KeyError)


# ================== USER PRESETS ==================


def test_user_with_posts_default_and_transient_override(
    session: Session, factory: BlogFactory
) -> None:
    writer = factory.users.create("with_posts")
    busy = factory.users.create("with_posts", posts_count=5)

    assert _count(session, Post.id, Post.user_id == writer.id) == 3
    assert _count(session, Post.id, Post.user_id == busy.id) == 5


def test_prolific_writer_includes_with_posts(session: Session, factory: BlogFactory) -> None:
    user = factory.users.create("prolific_writer")
    assert _count(session, Post.id, Post.user_id == user.id) == 10


def test_user_with_comments_targets_one_post(session: Session, factory: BlogFactory) -> None:
    user = factory.users.create("with_comments")

    assert _count(session, Comment.id, Comment.user_id == user.id) == 2
    assert _count(session, distinct(Comment.post_id), Comment.user_id == user.id) == 1
    # Both candidate posts were written by someone else.
    assert _count(session, Post.id, Post.user_id == user.id) == 0
    assert table_counts(session)["posts"] == 2


def test_active_commenter(session: Session, factory: BlogFactory) -> None:
    user = factory.users.create("active_commenter")
    assert _count(session, Comment.id, Comment.user_id == user.id) == 5


def test_admin_and_guest_presets(session: Session, factory: BlogFactory) -> None:
    admin = factory.users.create("admin")
    guest = factory.users.build("guest")

    assert admin.name.startswith("Admin ")
    assert admin.email.startswith("admin+") and admin.email.endswith("@blog.com")
    titles = session.scalars(select(Post.title).where(Post.user_id == admin.id)).all()
    assert len(titles) == 5
    assert all(title.startswith("Admin: ") for title in titles)
    assert guest.name.startswith("Guest ")
    assert guest.email.startswith("guest+")


def test_lightweight_user(factory: BlogFactory) -> None:
    assert factory.users.build("lightweight").name == "User"


# ================== POST PRESETS ==================


def test_post_with_comments_and_tags(session: Session, factory: BlogFactory) -> None:
    post = factory.posts.create("with_comments_and_tags")

    assert _count(session, Comment.id, Comment.post_id == post.id) == 2
    assert _count(session, PostTag.id, PostTag.post_id == post.id) == 2


def test_popular_post(session: Session, factory: BlogFactory) -> None:
    post = factory.posts.create("popular")

    assert _count(session, Comment.id, Comment.post_id == post.id) == 5
    assert _count(session, PostTag.id, PostTag.post_id == post.id) == 3


def test_with_tags_respects_transient(session: Session, factory: BlogFactory) -> None:
    post = factory.posts.create("with_tags", tags_count=4)
    assert _count(session, PostTag.id, PostTag.post_id == post.id) == 4


def test_recent_and_old_posts(factory: BlogFactory) -> None:
    now = utcnow()
    recent = factory.posts.build("recent")
    old = factory.posts.build("old")

    assert now - timedelta(days=2) < recent.created_at < now
    assert old.created_at < now - timedelta(days=300)


# ================== COMMENT PRESETS ==================


def test_comment_with_associations_uses_transients(
    session: Session, factory: BlogFactory
) -> None:
    writer = factory.users.create()
    reader = factory.users.create()

    comment = factory.comments.create(
        "with_associations", post_user=writer, comment_user=reader
    )

    assert comment.post.author is writer
    assert comment.author is reader
    assert table_counts(session)["users"] == 2


def test_comment_with_context_builds_foreign_post(
    session: Session, factory: BlogFactory
) -> None:
    comment = factory.comments.build("with_context")

    assert comment.post.author is not comment.author
    assert comment.post.id is None
    assert comment.author.id is None
    assert table_counts(session)["comments"] == 0


def test_comment_with_context_stays_built_under_stub_strategy(factory: BlogFactory) -> None:
    # The associations pin the build strategy even when the caller stubs.
    comment = factory.comments.stub("with_context")
    assert comment.id >= STUB_ID_FLOOR
    assert comment.post.id is None


def test_comment_with_context_under_create_saves_its_associations(
    session: Session, factory: BlogFactory
) -> None:
    comment = factory.comments.create("with_context")

    assert comment.post.id is not None
    assert comment.author.id is not None
    assert comment.post.user_id != comment.user_id
    counts = table_counts(session)
    assert (counts["users"], counts["posts"], counts["comments"]) == (2, 1, 1)


# ================== TAG & POST TAG PRESETS ==================


def test_named_tags_are_unique(factory: BlogFactory) -> None:
    assert factory.tags.create("ruby_tag").name == "Ruby"
    with pytest.raises(DuplicateTagNameError):
        factory.tags.create("ruby_tag")


def test_tag_with_posts(session: Session, factory: BlogFactory) -> None:
    tag = factory.tags.create("with_posts", posts_count=3)
    assert _count(session, PostTag.id, PostTag.tag_id == tag.id) == 3


def test_post_tag_presets(factory: BlogFactory) -> None:
    link = factory.post_tags.create("ruby_post_tag")
    assert link.post.title == "Getting Started with Ruby"
    assert link.tag.name == "Ruby"
    assert link.post_id == link.post.id


# ================== SCENARIOS ==================


def test_blog_ecosystem(session: Session, factory: BlogFactory) -> None:
    ecosystem = factory.blog_ecosystem()

    assert ecosystem.admin.email == "admin@blog.com"
    assert len(ecosystem.writers) == 3
    assert len(ecosystem.commenters) == 5
    assert [tag.name for tag in ecosystem.programming_tags] == list(PROGRAMMING_TAGS)
    for post in ecosystem.featured_posts:
        assert post.user_id == ecosystem.admin.id
        assert _count(session, Comment.id, Comment.post_id == post.id) == 5
        assert _count(session, PostTag.id, PostTag.post_id == post.id) == 5

    assert table_counts(session) == {
        "users": ECOSYSTEM_USERS,
        "posts": ECOSYSTEM_POSTS,
        "comments": ECOSYSTEM_COMMENTS,
        "tags": ECOSYSTEM_TAGS,
        "post_tags": ECOSYSTEM_POST_TAGS,
    }


def test_discussion_thread_defaults(session: Session, factory: BlogFactory) -> None:
    thread = factory.discussion_thread()

    assert len(thread.users) == 3
    assert len(thread.tags) == 5
    assert len(thread.posts) == 6
    assert len(thread.comments) == 18
    assert all(comment.author is not comment.post.author for comment in thread.comments)
    for post in thread.posts:
        assert 1 <= _count(session, PostTag.id, PostTag.post_id == post.id) <= 3


def test_discussion_thread_needs_two_commenters(factory: BlogFactory) -> None:
    with pytest.raises(ValueError, match="at least two users"):
        factory.discussion_thread(users_count=1)

    solo = factory.discussion_thread(users_count=1, comments_per_post=0)
    assert len(solo.posts) == 2
    assert solo.comments == []


def test_bulk_data(session: Session, factory: BlogFactory) -> None:
    summary = factory.bulk_data(users_count=5, posts_count=10, comments_count=20)

    assert summary.counts == {"users": 5, "posts": 10, "comments": 20}
    counts = table_counts(session)
    assert (counts["users"], counts["posts"], counts["comments"]) == (5, 10, 20)
    assert _count(session, User.id, User.name == "User") == 5


def test_bulk_data_without_users_inserts_nothing(session: Session, factory: BlogFactory) -> None:
    summary = factory.bulk_data(users_count=0)
    assert summary.counts == {"users": 0, "posts": 0, "comments": 0}
