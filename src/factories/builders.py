"""
Builders and presets for every blog entity.

Named records used by the challenge fixture ("john_doe", "ruby_post",
"ruby_tag", ...) are presets too, so a test reads
`factory.posts.create("ruby_post", author=john)`.
"""

from __future__ import annotations

from datetime import timedelta

from src.domain.integrity import tag_post_many
from src.domain.models import Comment, Post, PostTag, Tag, User, utcnow
from src.factories.base import Association, Builder, BuildConfig, Lazy, PresetRegistry
from src.factories.sequences import generate

# ================== USERS ==================


class UserBuilder(Builder[User]):
    model = User
    presets = PresetRegistry("UserBuilder")

    def configure(self, config: BuildConfig) -> None:
        config.set(
            name=Lazy(lambda ev: ev.factory.fake.name()),
            email=Lazy(lambda ev: generate("email")),
        )


def _named_user(name: str, email: str):
    def preset(config: BuildConfig) -> None:
        config.set(name=name, email=email)

    return preset


UserBuilder.presets.register("john_doe")(_named_user("John Doe", "john@example.com"))
UserBuilder.presets.register("jane_smith")(_named_user("Jane Smith", "jane@example.com"))
UserBuilder.presets.register("bob_wilson")(_named_user("Bob Wilson", "bob@example.com"))


@UserBuilder.presets.register("with_posts")
def _user_with_posts(config: BuildConfig) -> None:
    config.transient(posts_count=3)
    config.on_create(
        lambda user, ev: ev.factory.posts.create_list(ev.posts_count, author=user)
    )


@UserBuilder.presets.register("prolific_writer")
def _prolific_writer(config: BuildConfig) -> None:
    config.include("with_posts").transient(posts_count=10)


def _comment_on_sampled_post(user: User, ev) -> None:
    # Two fresh posts by other users; every comment lands on one of them.
    posts = ev.factory.posts.create_list(2)
    target = ev.factory.fake.choice(posts)
    ev.factory.comments.create_list(ev.comments_count, author=user, post=target)


@UserBuilder.presets.register("with_comments")
def _user_with_comments(config: BuildConfig) -> None:
    config.transient(comments_count=2).on_create(_comment_on_sampled_post)


@UserBuilder.presets.register("active_commenter")
def _active_commenter(config: BuildConfig) -> None:
    config.include("with_comments").transient(comments_count=5)


@UserBuilder.presets.register("admin")
def _admin(config: BuildConfig) -> None:
    config.set(
        name=Lazy(lambda ev: f"Admin {ev.factory.fake.last_name()}"),
        email=Lazy(lambda ev: f"admin+{ev.factory.fake.hex(8)}@blog.com"),
    )
    config.transient(admin_posts_count=5)
    config.on_create(
        lambda user, ev: [
            ev.factory.posts.create(author=user, title=f"Admin: {ev.factory.fake.sentence()}")
            for _ in range(ev.admin_posts_count)
        ]
    )


@UserBuilder.presets.register("guest")
def _guest(config: BuildConfig) -> None:
    config.set(
        name=Lazy(lambda ev: f"Guest {ev.factory.fake.first_name()}"),
        email=Lazy(lambda ev: f"guest+{ev.factory.fake.hex(8)}@blog.com"),
    )


@UserBuilder.presets.register("lightweight")
def _lightweight(config: BuildConfig) -> None:
    config.set(name="User")


# ================== POSTS ==================


class PostBuilder(Builder[Post]):
    model = Post
    presets = PresetRegistry("PostBuilder")

    def configure(self, config: BuildConfig) -> None:
        config.set(
            title=Lazy(lambda ev: ev.factory.fake.sentence(3)),
            content=Lazy(lambda ev: ev.factory.fake.paragraph(5)),
            author=Association("users"),
        )


def _named_post(title: str, content: str):
    def preset(config: BuildConfig) -> None:
        config.set(title=title, content=content)

    return preset


PostBuilder.presets.register("ruby_post")(
    _named_post("Getting Started with Ruby", "Ruby basics tutorial")
)
PostBuilder.presets.register("rails_post")(
    _named_post("Advanced Rails Techniques", "Advanced Rails concepts")
)
PostBuilder.presets.register("javascript_post")(
    _named_post("JavaScript for Beginners", "JS fundamentals")
)
PostBuilder.presets.register("react_post")(
    _named_post("React Development", "React components guide")
)
PostBuilder.presets.register("database_post")(
    _named_post("Database Optimization", "SQL optimization tips")
)


@PostBuilder.presets.register("sequenced_title")
def _sequenced_title(config: BuildConfig) -> None:
    config.set(title=Lazy(lambda ev: generate("title")))


@PostBuilder.presets.register("with_comments")
def _post_with_comments(config: BuildConfig) -> None:
    config.transient(comments_count=2)
    config.on_create(
        lambda post, ev: ev.factory.comments.create_list(ev.comments_count, post=post)
    )


@PostBuilder.presets.register("with_tags")
def _post_with_tags(config: BuildConfig) -> None:
    config.transient(tags_count=2)
    config.on_create(
        lambda post, ev: tag_post_many(
            ev.factory.require_session(), post, ev.factory.tags.create_list(ev.tags_count)
        )
    )


@PostBuilder.presets.register("with_comments_and_tags")
def _post_with_comments_and_tags(config: BuildConfig) -> None:
    config.include("with_comments", "with_tags")


@PostBuilder.presets.register("popular")
def _popular(config: BuildConfig) -> None:
    config.include("with_comments", "with_tags").transient(comments_count=5, tags_count=3)


@PostBuilder.presets.register("recent")
def _recent(config: BuildConfig) -> None:
    config.set(created_at=Lazy(lambda ev: utcnow() - timedelta(days=1)))


@PostBuilder.presets.register("old")
def _old(config: BuildConfig) -> None:
    config.set(created_at=Lazy(lambda ev: utcnow() - timedelta(days=365)))


# ================== COMMENTS ==================


class CommentBuilder(Builder[Comment]):
    model = Comment
    presets = PresetRegistry("CommentBuilder")

    def configure(self, config: BuildConfig) -> None:
        config.set(
            content=Lazy(lambda ev: ev.factory.fake.sentence(4)),
            post=Association("posts"),
            author=Association("users"),
        )


def _named_comment(content: str):
    def preset(config: BuildConfig) -> None:
        config.set(content=content)

    return preset


CommentBuilder.presets.register("great_tutorial")(_named_comment("Great tutorial!"))
CommentBuilder.presets.register("helpful")(_named_comment("Very helpful"))
CommentBuilder.presets.register("thanks")(_named_comment("Thanks for sharing"))
CommentBuilder.presets.register("excellent")(_named_comment("Excellent guide"))
CommentBuilder.presets.register("well_written")(_named_comment("Well written"))


@CommentBuilder.presets.register("with_associations")
def _comment_with_associations(config: BuildConfig) -> None:
    """`post_user` writes the commented post, `comment_user` writes the comment."""
    config.transient(post_user=None, comment_user=None)
    config.set(
        post=Lazy(
            lambda ev: ev.factory.posts.create(author=ev.post_user)
            if ev.post_user is not None
            else ev.association("posts")
        ),
        author=Lazy(
            lambda ev: ev.comment_user
            if ev.comment_user is not None
            else ev.association("users")
        ),
    )


def _ensure_foreign_post(comment: Comment, ev) -> None:
    if comment.post.author is comment.author:
        comment.post.author = ev.factory.users.build()


@CommentBuilder.presets.register("with_context")
def _comment_with_context(config: BuildConfig) -> None:
    """
    Associations use the build strategy and the post belongs to someone else.
    Under `create` the built author and post are validated and saved with the comment.
    """
    config.set(
        author=Association("users", strategy="build"),
        post=Association("posts", strategy="build"),
    )
    config.on_build(_ensure_foreign_post)


# ================== TAGS ==================


class TagBuilder(Builder[Tag]):
    model = Tag
    presets = PresetRegistry("TagBuilder")

    def configure(self, config: BuildConfig) -> None:
        config.set(name=Lazy(lambda ev: generate("tag_name")))


def _named_tag(name: str):
    def preset(config: BuildConfig) -> None:
        config.set(name=name)

    return preset


for _preset_name, _tag_name in (
    ("ruby_tag", "Ruby"),
    ("rails_tag", "Rails"),
    ("javascript_tag", "JavaScript"),
    ("react_tag", "React"),
    ("python_tag", "Python"),
    ("vue_tag", "Vue"),
):
    TagBuilder.presets.register(_preset_name)(_named_tag(_tag_name))


@TagBuilder.presets.register("programming_language")
def _programming_language(config: BuildConfig) -> None:
    config.set(name=Lazy(lambda ev: ev.factory.fake.programming_language()))


def _tag_posts(tag: Tag, ev) -> None:
    session = ev.factory.require_session()
    for post in ev.factory.posts.create_list(ev.posts_count):
        tag_post_many(session, post, [tag])


@TagBuilder.presets.register("with_posts")
def _tag_with_posts(config: BuildConfig) -> None:
    config.transient(posts_count=2).on_create(_tag_posts)


# ================== POST TAGS ==================


class PostTagBuilder(Builder[PostTag]):
    model = PostTag
    presets = PresetRegistry("PostTagBuilder")

    def configure(self, config: BuildConfig) -> None:
        config.set(post=Association("posts"), tag=Association("tags"))


@PostTagBuilder.presets.register("ruby_post_tag")
def _ruby_post_tag(config: BuildConfig) -> None:
    config.set(post=Association("posts", "ruby_post"), tag=Association("tags", "ruby_tag"))


@PostTagBuilder.presets.register("rails_post_tag")
def _rails_post_tag(config: BuildConfig) -> None:
    config.set(post=Association("posts", "rails_post"), tag=Association("tags", "rails_tag"))


__all__ = ["UserBuilder", "PostBuilder", "CommentBuilder", "TagBuilder", "PostTagBuilder"]
