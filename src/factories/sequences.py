"""
Named sequences for unique fixture values.

    generate("email")     -> "user1@example.com", "user2@example.com", ...
    generate("title")     -> "Blog Post Title 1", ...
    generate("tag_name")  -> "Tag1", ...
"""

from __future__ import annotations

import itertools
import threading
from typing import Callable, Dict, Iterator, Union


class Sequence:
    """Thread-safe counter rendered through a template or a callable."""

    def __init__(self, template: Union[str, Callable[[int], str]], start: int = 1) -> None:
        self._template = template
        self._start = start
        self._lock = threading.Lock()
        self._counter: Iterator[int] = itertools.count(start)

    def next(self) -> str:
        with self._lock:
            n = next(self._counter)
        if callable(self._template):
            return self._template(n)
        return self._template.format(n=n)

    __call__ = next

    def reset(self) -> None:
        with self._lock:
            self._counter = itertools.count(self._start)


SEQUENCES: Dict[str, Sequence] = {
    "email": Sequence("user{n}@example.com"),
    "title": Sequence("Blog Post Title {n}"),
    "tag_name": Sequence("Tag{n}"),
}


def generate(name: str) -> str:
    """Next value of the named sequence."""
    try:
        sequence = SEQUENCES[name]
    except KeyError:
        raise KeyError(f"Unknown sequence '{name}'. Available: {', '.join(SEQUENCES)}") from None
    return sequence.next()


def reset_sequences() -> None:
    for sequence in SEQUENCES.values():
        sequence.reset()


__all__ = ["Sequence", "SEQUENCES", "generate", "reset_sequences"]
