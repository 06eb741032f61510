from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar

from combinatorial_strategy_engine.configuration import StrategyRole

MARKERS_ATTRIBUTE = "__strategy_markers__"

CONSTRUCTOR_BASED_PROVIDER = "constructor-based"

Decorated = TypeVar("Decorated")


@dataclass(frozen=True)
class StrategyMarker:
    """
    Declarative tag naming the provider that supplies a strategy.

    ``provider`` is a provider id looked up in the provider registry.
    ``parameters`` are handed to the provider before it is invoked.

    Subclasses define marker kinds; a lookup for a kind also matches every
    subclass of it, so specialised markers are found through their base kind.
    """

    provider: str
    parameters: Mapping[str, Any] = field(default_factory=dict, hash=False)

    role: ClassVar[StrategyRole | None] = None

    def __post_init__(self) -> None:
        if not isinstance(self.provider, str) or not self.provider:
            raise ValueError("marker provider must be a non-empty string")
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, parameters={dict(self.parameters)!r})"


# -------------------------
# marker kinds, one per role
# -------------------------


@dataclass(frozen=True, repr=False)
class ModelSource(StrategyMarker):
    role: ClassVar[StrategyRole | None] = StrategyRole.MODEL


@dataclass(frozen=True, repr=False)
class ConstraintCheckerSource(StrategyMarker):
    role: ClassVar[StrategyRole | None] = StrategyRole.CONSTRAINT_CHECKER


@dataclass(frozen=True, repr=False)
class CombinationFactorySource(StrategyMarker):
    role: ClassVar[StrategyRole | None] = StrategyRole.COMBINATION_FACTORY


@dataclass(frozen=True, repr=False)
class ParameterOrderSource(StrategyMarker):
    role: ClassVar[StrategyRole | None] = StrategyRole.PARAMETER_ORDER


@dataclass(frozen=True, repr=False)
class ReporterSource(StrategyMarker):
    role: ClassVar[StrategyRole | None] = StrategyRole.REPORTER


@dataclass(frozen=True, repr=False)
class CharacterizationAlgorithmSource(StrategyMarker):
    """Fault characterization is not a configuration slot, hence no role."""


MARKER_KINDS_BY_ROLE: dict[StrategyRole, type[StrategyMarker]] = {
    StrategyRole.MODEL: ModelSource,
    StrategyRole.CONSTRAINT_CHECKER: ConstraintCheckerSource,
    StrategyRole.COMBINATION_FACTORY: CombinationFactorySource,
    StrategyRole.PARAMETER_ORDER: ParameterOrderSource,
    StrategyRole.REPORTER: ReporterSource,
}


# -------------------------
# specialised markers
# -------------------------


def _constructor_based(marker: StrategyMarker, strategy_name: str, options: Mapping[str, Any]) -> None:
    StrategyMarker.__init__(
        marker,
        provider=CONSTRUCTOR_BASED_PROVIDER,
        parameters={"strategy_name": strategy_name, **options},
    )


@dataclass(frozen=True, init=False, repr=False)
class CharacterizationAlgorithm(CharacterizationAlgorithmSource):
    """
    Selects a registered characterization algorithm by id. Extra keyword
    arguments are passed to its constructor.
    """

    def __init__(self, algorithm: str, **options: Any) -> None:
        _constructor_based(self, algorithm, options)


@dataclass(frozen=True, init=False, repr=False)
class UseConstraintChecker(ConstraintCheckerSource):
    def __init__(self, strategy_name: str, **options: Any) -> None:
        _constructor_based(self, strategy_name, options)


@dataclass(frozen=True, init=False, repr=False)
class UseCombinationFactory(CombinationFactorySource):
    def __init__(self, strategy_name: str, **options: Any) -> None:
        _constructor_based(self, strategy_name, options)


@dataclass(frozen=True, init=False, repr=False)
class UseParameterOrder(ParameterOrderSource):
    def __init__(self, strategy_name: str, **options: Any) -> None:
        _constructor_based(self, strategy_name, options)


@dataclass(frozen=True, init=False, repr=False)
class UseReporter(ReporterSource):
    def __init__(self, strategy_name: str, **options: Any) -> None:
        _constructor_based(self, strategy_name, options)


# -------------------------
# attaching markers
# -------------------------


def marker(*markers: StrategyMarker) -> Callable[[Decorated], Decorated]:
    """
    Attach markers to a test function or class.

    Stacked decorators keep source order: the top-most decorator's markers
    come first.
    """
    for m in markers:
        if not isinstance(m, StrategyMarker):
            raise TypeError(f"expected StrategyMarker, got {type(m).__name__}")

    def decorator(obj: Decorated) -> Decorated:
        existing = declared_markers(obj)
        setattr(obj, MARKERS_ATTRIBUTE, tuple(markers) + existing)
        return obj

    return decorator


def declared_markers(obj: Any) -> tuple[StrategyMarker, ...]:
    """
    Markers attached directly to ``obj``. Markers of base classes are not
    included; those are part of the declaration chain instead.
    """
    own = getattr(obj, "__dict__", {})
    return tuple(own.get(MARKERS_ATTRIBUTE, ()))
