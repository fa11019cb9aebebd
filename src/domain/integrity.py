"""
Create-time validation and persistence for blog records.

`persist()` checks uniqueness and parent references before the INSERT is
flushed, so callers get a precise `IntegrityViolation` instead of a
driver-specific `IntegrityError`. Database constraints stay in place as the
backstop; anything they still reject is translated as well.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Set, TypeVar

from sqlalchemy import exists, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.domain.models import Comment, Post, PostTag, Tag, User
from src.exceptions import (
    DuplicateAssociationError,
    DuplicateEmailError,
    DuplicateTagNameError,
    IntegrityViolation,
    OrphanReferenceError,
)
from src.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def _row_exists(session: Session, model: type, ident: Any) -> bool:
    if ident is None:
        return False
    return session.get(model, ident) is not None


def _require_parent(
    session: Session,
    entity: str,
    reference: str,
    obj: Optional[Any],
    ident: Any,
    model: type,
    seen: Set[int],
) -> None:
    """
    A parent is either an object or the id of an existing row. An unsaved parent
    object is inserted along with its child, so it is validated as new too.
    """
    if obj is not None:
        if inspect(obj).transient:
            _validate(session, obj, seen)
        return
    if ident is None:
        raise OrphanReferenceError(entity, reference)
    if not _row_exists(session, model, ident):
        raise OrphanReferenceError(entity, reference, ident)


def _check_user(session: Session, user: User, seen: Set[int]) -> None:
    if session.scalar(select(exists().where(User.email == user.email))):
        raise DuplicateEmailError(user.email)


def _check_tag(session: Session, tag: Tag, seen: Set[int]) -> None:
    if session.scalar(select(exists().where(Tag.name == tag.name))):
        raise DuplicateTagNameError(tag.name)


def _check_post(session: Session, post: Post, seen: Set[int]) -> None:
    _require_parent(session, "Post", "author", post.author, post.user_id, User, seen)


def _check_comment(session: Session, comment: Comment, seen: Set[int]) -> None:
    _require_parent(session, "Comment", "post", comment.post, comment.post_id, Post, seen)
    _require_parent(session, "Comment", "author", comment.author, comment.user_id, User, seen)


def _check_post_tag(session: Session, link: PostTag, seen: Set[int]) -> None:
    _require_parent(session, "PostTag", "post", link.post, link.post_id, Post, seen)
    _require_parent(session, "PostTag", "tag", link.tag, link.tag_id, Tag, seen)
    post_id = link.post.id if link.post is not None else link.post_id
    tag_id = link.tag.id if link.tag is not None else link.tag_id
    if post_id is None or tag_id is None:
        # One side is still pending, so no existing row can collide.
        return
    duplicate = session.scalar(
        select(exists().where(PostTag.post_id == post_id, PostTag.tag_id == tag_id))
    )
    if duplicate:
        raise DuplicateAssociationError(post_id, tag_id)


_VALIDATORS = {
    User: _check_user,
    Tag: _check_tag,
    Post: _check_post,
    Comment: _check_comment,
    PostTag: _check_post_tag,
}


def _validate(session: Session, obj: Any, seen: Set[int]) -> None:
    if id(obj) in seen:
        return
    seen.add(id(obj))
    validator = _VALIDATORS.get(type(obj))
    if validator is None:
        raise TypeError(f"No integrity rules registered for {type(obj).__name__}")
    validator(session, obj, seen)


def validate_new(session: Session, obj: Any) -> None:
    """
    Run the create-time checks registered for `obj`'s model.

    Raises
    ------
    IntegrityViolation
        On a duplicate unique value or a missing parent reference, in `obj` or in
        any unsaved parent it would cascade into the INSERT.
    """
    # The new object is already linked to its parents; it must not be flushed early.
    with session.no_autoflush:
        _validate(session, obj, set())


def persist(session: Session, obj: T) -> T:
    """
    Validate, add and flush a new record, returning it with its primary key set.

    The flush runs inside a SAVEPOINT: a constraint failure undoes only this
    insert, and records flushed earlier in the transaction are kept.
    """
    validate_new(session, obj)
    try:
        with session.begin_nested():
            session.add(obj)
            session.flush()
    except IntegrityError as exc:
        log.warning(
            "Constraint rejected insert",
            extra={"entity": type(obj).__name__, "error": str(exc.orig)},
        )
        raise IntegrityViolation(f"{type(obj).__name__} violates a constraint: {exc.orig}") from exc
    return obj


def persist_all(session: Session, objects: Iterable[T]) -> List[T]:
    """Persist records one at a time so each is validated against the previous."""
    return [persist(session, obj) for obj in objects]


def tag_post(session: Session, post: Post, tag: Tag) -> PostTag:
    """Associate a post and a tag through an explicit `PostTag` row."""
    return persist(session, PostTag(post=post, tag=tag))


def tag_post_many(session: Session, post: Post, tags: Iterable[Tag]) -> List[PostTag]:
    return [tag_post(session, post, tag) for tag in tags]


__all__ = ["validate_new", "persist", "persist_all", "tag_post", "tag_post_many"]
