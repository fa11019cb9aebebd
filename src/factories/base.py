"""
Builder core: lazy attributes, associations, presets and build strategies.

A builder turns three layers of configuration into one entity:

1. the builder's own defaults (`Builder.configure`),
2. named presets, applied in the order requested,
3. keyword overrides from the call site.

Presets are plain configuration functions registered on the builder class::

    @UserBuilder.presets.register("with_posts")
    def with_posts(config: BuildConfig) -> None:
        config.transient(posts_count=3)
        config.on_create(lambda user, ev: ev.factory.posts.create_list(ev.posts_count, author=user))

Keyword overrides whose name matches a transient attribute configure the
hooks instead of the entity (`users.create("with_posts", posts_count=5)`).

Strategies:
- build:  an unsaved instance; associations are built too.
- create: validated and flushed through `src.domain.integrity.persist`;
          associations are created first; after-create hooks run last.
- stub:   an in-memory instance with a fake primary key; never touches the
          database.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

from sqlalchemy import inspect
from sqlalchemy.orm import MANYTOONE

from src.domain.integrity import persist
from src.domain.models import utcnow
from src.exceptions import UnknownPresetError

if TYPE_CHECKING:
    from src.factories.blog import BlogFactory

T = TypeVar("T")

BUILD = "build"
CREATE = "create"
STUB = "stub"
STRATEGIES = (BUILD, CREATE, STUB)

Hook = Callable[[Any, "Evaluator"], None]

# Fake primary keys for stubs; far above anything a test database hands out.
_stub_ids: Iterator[int] = itertools.count(1_000_001)


class Lazy:
    """Attribute value computed at build time from the evaluator."""

    def __init__(self, fn: Callable[["Evaluator"], Any]) -> None:
        self.fn = fn

    def evaluate(self, evaluator: "Evaluator") -> Any:
        return self.fn(evaluator)


class Association:
    """Attribute value produced by another builder.

    The parent's strategy is used unless `strategy` pins one (e.g. "build").
    """

    def __init__(
        self, builder: str, *presets: str, strategy: Optional[str] = None, **overrides: Any
    ) -> None:
        self.builder = builder
        self.presets = presets
        self.strategy = strategy
        self.overrides = overrides

    def evaluate(self, evaluator: "Evaluator") -> Any:
        return evaluator.association(
            self.builder, *self.presets, strategy=self.strategy, **self.overrides
        )


class Evaluator:
    """
    What lazy attributes and hooks can see while an entity is built.

    Transient values are exposed as attributes (`ev.posts_count`), resolved
    entity attributes through `ev.attributes`.
    """

    def __init__(
        self, factory: "BlogFactory", strategy: str, transients: Mapping[str, Any]
    ) -> None:
        self.factory = factory
        self.strategy = strategy
        self.transients = dict(transients)
        self.attributes: Dict[str, Any] = {}

    def __getattr__(self, name: str) -> Any:
        transients = self.__dict__.get("transients", {})
        if name in transients:
            return transients[name]
        raise AttributeError(f"No transient attribute '{name}'")

    def association(
        self, builder: str, *presets: str, strategy: Optional[str] = None, **overrides: Any
    ) -> Any:
        target = getattr(self.factory, builder)
        return target.run(strategy or self.strategy, *presets, **overrides)


@dataclass
class BuildConfig:
    """Mutable accumulator that presets write into."""

    registry: "PresetRegistry"
    attributes: Dict[str, Any] = field(default_factory=dict)
    transients: Dict[str, Any] = field(default_factory=dict)
    after_build: List[Hook] = field(default_factory=list)
    after_create: List[Hook] = field(default_factory=list)
    applied: List[str] = field(default_factory=list)

    def set(self, **attributes: Any) -> "BuildConfig":
        self.attributes.update(attributes)
        return self

    def transient(self, **defaults: Any) -> "BuildConfig":
        self.transients.update(defaults)
        return self

    def on_build(self, hook: Hook) -> "BuildConfig":
        self.after_build.append(hook)
        return self

    def on_create(self, hook: Hook) -> "BuildConfig":
        self.after_create.append(hook)
        return self

    def include(self, *names: str) -> "BuildConfig":
        """Apply other presets of the same builder (composition)."""
        for name in names:
            self.registry.apply(name, self)
        return self


PresetFn = Callable[[BuildConfig], None]


class PresetRegistry:
    """Named configuration functions for one builder."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._presets: Dict[str, PresetFn] = {}

    def register(self, name: str) -> Callable[[PresetFn], PresetFn]:
        def decorator(fn: PresetFn) -> PresetFn:
            self._presets[name] = fn
            return fn

        return decorator

    def names(self) -> List[str]:
        return sorted(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def apply(self, name: str, config: BuildConfig) -> None:
        if name not in self._presets:
            raise UnknownPresetError(self.owner, name, list(self._presets))
        self._presets[name](config)
        config.applied.append(name)


class Builder(Generic[T]):
    """
    Base builder for one model. Subclasses set `model`, `presets` and
    implement `configure` with the default attributes.
    """

    model: ClassVar[type]
    presets: ClassVar[PresetRegistry]

    def __init__(self, factory: "BlogFactory") -> None:
        self.factory = factory

    @property
    def fake(self):
        return self.factory.fake

    def configure(self, config: BuildConfig) -> None:  # pragma: no cover - interface only
        """Write default attributes (and transients) into `config`."""
        raise NotImplementedError

    # --- resolution ---

    def _configure(self, presets: Tuple[str, ...], overrides: Mapping[str, Any]) -> BuildConfig:
        config = BuildConfig(registry=self.presets)
        self.configure(config)
        for name in presets:
            self.presets.apply(name, config)

        for key, value in overrides.items():
            if key in config.transients:
                config.transients[key] = value
            else:
                config.attributes[key] = value
        return config

    def _instantiate(
        self, strategy: str, presets: Tuple[str, ...], overrides: Mapping[str, Any]
    ) -> Tuple[T, BuildConfig, Evaluator]:
        config = self._configure(presets, overrides)
        evaluator = Evaluator(self.factory, strategy, config.transients)
        for key, value in config.attributes.items():
            if isinstance(value, (Lazy, Association)):
                value = value.evaluate(evaluator)
            evaluator.attributes[key] = value
        instance = self.model(**evaluator.attributes)
        for hook in config.after_build:
            hook(instance, evaluator)
        return instance, config, evaluator

    # --- strategies ---

    def build(self, *presets: str, **overrides: Any) -> T:
        instance, _, _ = self._instantiate(BUILD, presets, overrides)
        return instance

    def create(self, *presets: str, **overrides: Any) -> T:
        session = self.factory.require_session()
        instance, config, evaluator = self._instantiate(CREATE, presets, overrides)
        persist(session, instance)
        for hook in config.after_create:
            hook(instance, evaluator)
        return instance

    def stub(self, *presets: str, **overrides: Any) -> T:
        instance, _, _ = self._instantiate(STUB, presets, overrides)
        _fill_stub(instance)
        return instance

    def run(self, strategy: str, *presets: str, **overrides: Any) -> T:
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy '{strategy}'. Available: {', '.join(STRATEGIES)}")
        return getattr(self, strategy)(*presets, **overrides)

    def build_list(self, count: int, *presets: str, **overrides: Any) -> List[T]:
        return [self.build(*presets, **overrides) for _ in range(count)]

    def create_list(self, count: int, *presets: str, **overrides: Any) -> List[T]:
        return [self.create(*presets, **overrides) for _ in range(count)]

    def stub_list(self, count: int, *presets: str, **overrides: Any) -> List[T]:
        return [self.stub(*presets, **overrides) for _ in range(count)]


def _fill_stub(instance: Any) -> None:
    """Give a stub a primary key, a timestamp and FK values from its parents."""
    mapper = inspect(type(instance))
    if getattr(instance, "id", None) is None:
        instance.id = next(_stub_ids)
    if "created_at" in mapper.columns and getattr(instance, "created_at", None) is None:
        instance.created_at = utcnow()
    for relationship in mapper.relationships:
        if relationship.direction is not MANYTOONE:
            continue
        parent = instance.__dict__.get(relationship.key)
        if parent is None:
            continue
        for local, remote in relationship.local_remote_pairs:
            setattr(instance, local.key, getattr(parent, remote.key))


__all__ = [
    "BUILD",
    "CREATE",
    "STUB",
    "Lazy",
    "Association",
    "Evaluator",
    "BuildConfig",
    "PresetRegistry",
    "Builder",
]
