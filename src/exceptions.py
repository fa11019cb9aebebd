"""Exception hierarchy for the Blog Query Challenges.

Raw SQLAlchemy/driver integrity errors are translated into
`IntegrityViolation` subclasses before they reach callers.
"""

from __future__ import annotations

from typing import Any


class QueryChallengeError(Exception):
    """Base exception for all project errors."""


# --- Integrity ---


class IntegrityViolation(QueryChallengeError):
    """A record failed create-time validation or a database constraint."""


class DuplicateEmailError(IntegrityViolation):
    """Raised when a user email is already taken."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email already registered: '{email}'")


class DuplicateTagNameError(IntegrityViolation):
    """Raised when a tag name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tag already exists: '{name}'")


class DuplicateAssociationError(IntegrityViolation):
    """Raised when a post is tagged twice with the same tag."""

    def __init__(self, post_id: Any, tag_id: Any) -> None:
        self.post_id = post_id
        self.tag_id = tag_id
        super().__init__(f"Post {post_id} is already tagged with tag {tag_id}")


class OrphanReferenceError(IntegrityViolation):
    """Raised when a record references a missing (or unset) parent."""

    def __init__(self, entity: str, reference: str, value: Any = None) -> None:
        self.entity = entity
        self.reference = reference
        self.value = value
        if value is None:
            message = f"{entity}.{reference} is required"
        else:
            message = f"{entity}.{reference} points to missing record {value!r}"
        super().__init__(message)


# --- Challenges ---


class UnknownChallengeError(QueryChallengeError, KeyError):
    """Raised when a challenge key is not registered."""

    def __init__(self, key: str, available: list[str]) -> None:
        self.key = key
        self.available = available
        super().__init__(f"Unknown challenge '{key}'. Available: {', '.join(available)}")

    def __str__(self) -> str:
        return str(self.args[0])


# --- Builders ---


class UnknownPresetError(QueryChallengeError, KeyError):
    """Raised when a builder is asked for a preset it does not define."""

    def __init__(self, builder: str, preset: str, available: list[str]) -> None:
        self.builder = builder
        self.preset = preset
        super().__init__(
            f"{builder} has no preset '{preset}'. Available: {', '.join(sorted(available))}"
        )

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "QueryChallengeError",
    "IntegrityViolation",
    "DuplicateEmailError",
    "DuplicateTagNameError",
    "DuplicateAssociationError",
    "OrphanReferenceError",
    "UnknownChallengeError",
    "UnknownPresetError",
]
