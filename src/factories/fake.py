"""
Deterministic pseudo-random text for fixtures.

All values come from one seeded `random.Random`, so a builder facade created
with the same seed produces the same names and sentences run after run.
"""

from __future__ import annotations

import random
from typing import List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")

FIRST_NAMES = [
    "Ada", "Alan", "Barbara", "Claude", "Dennis", "Edsger", "Frances", "Grace",
    "Guido", "Hedy", "Ivan", "Joan", "Ken", "Linus", "Margaret", "Niklaus",
    "Radia", "Shafi", "Tim", "Yukihiro",
]

LAST_NAMES = [
    "Allen", "Berners-Lee", "Dijkstra", "Hamilton", "Hopper", "Kernighan",
    "Knuth", "Lamarr", "Liskov", "Lovelace", "Matsumoto", "Perlman", "Ritchie",
    "Rossum", "Shannon", "Sutherland", "Thompson", "Torvalds", "Turing", "Wirth",
]

PROGRAMMING_LANGUAGES = [
    "Ada", "C", "Clojure", "Elixir", "Erlang", "Go", "Haskell", "Java",
    "JavaScript", "Kotlin", "Lua", "OCaml", "Perl", "PHP", "Python", "Ruby",
    "Rust", "Scala", "Swift", "TypeScript",
]

WORDS = [
    "query", "index", "join", "schema", "table", "column", "cursor", "commit",
    "migration", "aggregate", "filter", "group", "order", "limit", "offset",
    "relation", "record", "model", "session", "engine", "driver", "pool",
    "transaction", "constraint", "unique", "foreign", "primary", "key",
    "select", "insert", "update", "delete", "having", "distinct", "count",
    "average", "ratio", "metric", "tag", "post", "comment", "author", "blog",
]


class FakeData:
    """
    Small seeded generator for names, emails and lorem-style text.
    """

    def __init__(self, seed: int = 42) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def reseed(self, seed: int | None = None) -> None:
        self._rng.seed(self._seed if seed is None else seed)

    # --- people ---

    def first_name(self) -> str:
        return self._rng.choice(FIRST_NAMES)

    def last_name(self) -> str:
        return self._rng.choice(LAST_NAMES)

    def name(self) -> str:
        return f"{self.first_name()} {self.last_name()}"

    def hex(self, length: int = 8) -> str:
        return f"{self._rng.getrandbits(length * 4):0{length}x}"

    def programming_language(self) -> str:
        return self._rng.choice(PROGRAMMING_LANGUAGES)

    # --- text ---

    def words(self, count: int = 3) -> List[str]:
        return [self._rng.choice(WORDS) for _ in range(count)]

    def sentence(self, word_count: int = 6) -> str:
        text = " ".join(self.words(max(word_count, 1)))
        return text[0].upper() + text[1:] + "."

    def paragraph(self, sentence_count: int = 3) -> str:
        return " ".join(
            self.sentence(self._rng.randint(4, 10)) for _ in range(max(sentence_count, 1))
        )

    # --- picking ---

    def choice(self, items: Sequence[T]) -> T:
        return self._rng.choice(items)

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        return self._rng.sample(list(items), k)

    def randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

    def shuffle(self, items: MutableSequence[T]) -> None:
        self._rng.shuffle(items)


__all__ = ["FakeData", "FIRST_NAMES", "LAST_NAMES", "PROGRAMMING_LANGUAGES", "WORDS"]
