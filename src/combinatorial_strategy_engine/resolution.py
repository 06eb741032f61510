from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from combinatorial_strategy_engine.configuration import StrategyRole
from combinatorial_strategy_engine.internal.registry import (
    ConstructorRegistry,
    accepts_no_arguments,
    build_provider_registry,
)
from combinatorial_strategy_engine.markers import MARKER_KINDS_BY_ROLE, StrategyMarker
from combinatorial_strategy_engine.strategies import ParameterConsumer

StrategyType = TypeVar("StrategyType")


class StrategyResolutionError(RuntimeError):
    """
    Base class of configuration errors detected while resolving a strategy
    from a marker. These are never raised for failures inside a provider.
    """

    pass


class AmbiguousMarkerError(StrategyResolutionError):
    def __init__(self, marker_kind: type[StrategyMarker], specification: str, markers: tuple[StrategyMarker, ...]):
        super().__init__(
            f"{len(markers)} markers of kind {marker_kind.__name__} found for "
            f"'{specification}', at most one is allowed: {list(markers)}"
        )
        self.markers = markers


class ProviderInstantiationError(StrategyResolutionError):
    def __init__(self, provider: str, reason: str):
        super().__init__(f"provider {provider!r} could not be instantiated: {reason}")
        self.provider = provider


class ParameterInjectionError(StrategyResolutionError):
    pass


class Specification(Protocol):
    """What the resolver needs from a test specification."""

    name: str
    markers: tuple[StrategyMarker, ...]

    @property
    def context(self) -> Any: ...

    def declaration_chain(self) -> Iterable[Specification]: ...


def find_marker(
    specification: Specification, marker_kind: type[StrategyMarker]
) -> StrategyMarker | None:
    """
    Search the declaration chain of ``specification`` for a marker of
    ``marker_kind`` or any of its subclasses.

    Returns None if there is none. The same marker object reached through
    several declarations counts once.

    Raises:
        AmbiguousMarkerError: more than one distinct marker was found.
    """
    found: list[StrategyMarker] = []
    seen: set[int] = set()
    for declaration in specification.declaration_chain():
        for m in declaration.markers:
            if isinstance(m, marker_kind) and id(m) not in seen:
                seen.add(id(m))
                found.append(m)

    if len(found) > 1:
        raise AmbiguousMarkerError(marker_kind, specification.name, tuple(found))
    return found[0] if found else None


@dataclass(frozen=True, slots=True)
class StrategyResolver(Generic[StrategyType]):
    """
    Resolves the strategy a test specification asks for through its marker.

    Stateless: every call looks the marker up again, constructs a new
    provider and caches nothing.

    registry: provider constructors keyed by provider id. None means the
    builtin providers plus those registered as entry points.
    """

    marker_kind: type[StrategyMarker]
    registry: ConstructorRegistry | None = field(default=None, compare=False)

    @classmethod
    def for_role(
        cls, role: StrategyRole | str, *, registry: ConstructorRegistry | None = None
    ) -> StrategyResolver[Any]:
        return cls(marker_kind=MARKER_KINDS_BY_ROLE[StrategyRole(role)], registry=registry)

    def resolve(self, specification: Specification) -> StrategyType | None:
        """
        Return the strategy supplied by the marked provider, or None when the
        specification carries no marker of this kind.

        A provider may itself return None; that result is returned as is.
        Exceptions raised by the provider propagate unchanged.
        """
        found = find_marker(specification, self.marker_kind)
        if found is None:
            logging.debug(
                f"no {self.marker_kind.__name__} marker for '{specification.name}'"
            )
            return None

        provider = self._instantiate(found.provider)
        self._initialize(provider, found)

        result = provider.provide(specification.context)
        logging.debug(
            f"provider {found.provider!r} returned {type(result).__name__} "
            f"for '{specification.name}'"
        )
        return result

    def _instantiate(self, provider_id: str) -> Any:
        registry = self.registry if self.registry is not None else build_provider_registry()
        constructor = registry.lookup(provider_id)
        if constructor is None:
            raise ProviderInstantiationError(
                provider_id, f"unknown provider id. available={sorted(registry.merged())}"
            )
        if not accepts_no_arguments(constructor):
            raise ProviderInstantiationError(provider_id, "no constructor without arguments")

        try:
            provider = constructor()
        except Exception as e:
            raise ProviderInstantiationError(provider_id, f"{type(e).__name__}: {e}") from e

        if not callable(getattr(provider, "provide", None)):
            raise ProviderInstantiationError(
                provider_id, f"{type(provider).__name__} has no provide() method"
            )
        logging.debug(f"instantiated provider {provider_id!r}: {type(provider).__name__}")
        return provider

    @staticmethod
    def _initialize(provider: Any, found: StrategyMarker) -> None:
        if isinstance(provider, ParameterConsumer):
            provider.accept(found.parameters)
            return
        if found.parameters:
            raise ParameterInjectionError(
                f"provider {found.provider!r} does not accept parameters, "
                f"but marker declares {sorted(found.parameters)}"
            )
