from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Any

from packaging.utils import canonicalize_name

PROVIDER_ENTRYPOINT_GROUP = "combinatorial_strategy_engine.providers"
STRATEGY_ENTRYPOINT_GROUP = "combinatorial_strategy_engine.strategies"

Constructor = Callable[..., Any]


class RegistryError(RuntimeError):
    pass


class RegistryEntrypointError(RegistryError):
    pass


def normalize_id(value: str) -> str:
    """
    Normalize a provider or strategy id for consistent keying.

    Ids follow distribution name rules, so ``Constructor_Based`` and
    ``constructor-based`` are the same id.
    """
    return canonicalize_name(value)


@dataclass(frozen=True, slots=True)
class ConstructorRegistry:
    """
    Constructors available to a single run, keyed by normalized id.

    builtins: constructors shipped with the library
    externals: constructors discovered via entry points
    """

    builtins: Mapping[str, Constructor]
    externals: Mapping[str, Constructor]

    def merged(self) -> dict[str, Constructor]:
        builtins = {normalize_id(k): v for k, v in self.builtins.items()}
        externals = {normalize_id(k): v for k, v in self.externals.items()}
        dupes: set[str] = set(builtins).intersection(externals)
        if dupes:
            raise RegistryError(
                f"duplicate ids found in builtins and entry points: {sorted(dupes)}"
            )
        merged: dict[str, Constructor] = dict(builtins)
        merged.update(externals)
        return merged

    def lookup(self, entry_id: str) -> Constructor | None:
        return self.merged().get(normalize_id(entry_id))

    def with_entries(self, entries: Mapping[str, Constructor]) -> ConstructorRegistry:
        """
        Return a copy with additional external entries; used to register
        constructors programmatically, e.g. in tests.
        """
        externals = dict(self.externals)
        externals.update(entries)
        return ConstructorRegistry(builtins=self.builtins, externals=externals)


def validate_constructor(entry_id: str, constructor_obj: object) -> Constructor:
    """
    Enforce the entry point contract: the loaded object must be callable.

    Classes are accepted here; whether they can be constructed is only known
    when they are actually used.
    """
    if not callable(constructor_obj):
        raise RegistryEntrypointError(
            f"entry point '{entry_id}' must load a callable; got {type(constructor_obj).__name__}"
        )
    return constructor_obj


def accepts_no_arguments(constructor: Constructor) -> bool:
    try:
        sig = inspect.signature(constructor)
    except (TypeError, ValueError):
        # builtins without a signature; let the call decide
        return True
    for p in sig.parameters.values():
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue
        if p.default is p.empty:
            return False
    return True


def load_entrypoint_constructors(*, group: str) -> dict[str, Constructor]:
    """
    Discover constructors from entry points.

    Determinism rules:
      - entry point name is the id
      - duplicate ids within the same group are an error
      - loaded object must be callable
    """
    constructors: dict[str, Constructor] = {}
    dupes: set[str] = set()

    for ep in entry_points().select(group=group):
        entry_id = normalize_id(ep.name)
        constructor = validate_constructor(entry_id, ep.load())

        if entry_id in constructors:
            dupes.add(entry_id)
            continue

        constructors[entry_id] = constructor

    if dupes:
        raise RegistryEntrypointError(
            f"duplicate ids found in entry points group '{group}': {sorted(dupes)}"
        )

    return constructors


def build_provider_registry() -> ConstructorRegistry:
    from combinatorial_strategy_engine.internal.builtin_providers import BUILTIN_PROVIDERS

    return ConstructorRegistry(
        builtins=BUILTIN_PROVIDERS,
        externals=load_entrypoint_constructors(group=PROVIDER_ENTRYPOINT_GROUP),
    )


def build_strategy_registry() -> ConstructorRegistry:
    from combinatorial_strategy_engine.internal.builtin_providers import BUILTIN_STRATEGIES

    return ConstructorRegistry(
        builtins=BUILTIN_STRATEGIES,
        externals=load_entrypoint_constructors(group=STRATEGY_ENTRYPOINT_GROUP),
    )
