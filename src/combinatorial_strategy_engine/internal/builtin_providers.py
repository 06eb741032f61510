from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any

from combinatorial_strategy_engine.internal.builtin_strategies import (
    LoggingReporter,
    NoConstraintChecker,
    NoOpReporter,
    StrengthBasedParameterOrder,
    TWiseParameterCombinationFactory,
)
from combinatorial_strategy_engine.internal.registry import (
    Constructor,
    ConstructorRegistry,
    RegistryError,
    build_strategy_registry,
)
from combinatorial_strategy_engine.markers import CONSTRUCTOR_BASED_PROVIDER
from combinatorial_strategy_engine.strategies import ParameterConsumer, StrategyProvider


class ConstructorBasedProvider(StrategyProvider[Any], ParameterConsumer):
    """
    Provides a strategy by constructing a registered strategy type.

    Parameters (from the marker):
      - strategy_name: id of the strategy in the strategy registry
      - any other key: passed to the strategy constructor as keyword argument

    The strategy registry is built when ``provide`` runs unless one was
    assigned to ``registry`` beforehand.
    """

    def __init__(self) -> None:
        self.registry: ConstructorRegistry | None = None
        self._strategy_name: str | None = None
        self._options: dict[str, Any] = {}

    def accept(self, parameters: Mapping[str, Any]) -> None:
        strategy_name = parameters.get("strategy_name")
        if not isinstance(strategy_name, str) or not strategy_name:
            raise ValueError("strategy_name must be a non-empty string")
        self._strategy_name = strategy_name
        self._options = {k: v for k, v in parameters.items() if k != "strategy_name"}

    def provide(self, context: Any) -> Any:
        if self._strategy_name is None:
            raise RuntimeError(f"{type(self).__name__} requires a strategy_name parameter")

        registry = self.registry if self.registry is not None else build_strategy_registry()
        strategy_cls = registry.lookup(self._strategy_name)
        if strategy_cls is None:
            raise RegistryError(
                f"unknown strategy id {self._strategy_name!r}. available={sorted(registry.merged())}"
            )

        _validate_ctor_kwargs(strategy_cls, self._options, ctx=f"strategy={self._strategy_name}")
        return strategy_cls(**self._options)


def _validate_ctor_kwargs(
    strategy_cls: Constructor, ctor_kwargs: Mapping[str, Any], *, ctx: str
) -> None:
    """
    If the constructor accepts **kwargs, allow anything.
    Otherwise require all keys to be accepted parameters.
    """
    params = inspect.signature(strategy_cls).parameters.values()
    if any(p.kind is p.VAR_KEYWORD for p in params):
        return
    allowed = {p.name for p in params}
    extra = [k for k in ctor_kwargs if k not in allowed]
    if extra:
        raise RegistryError(f"{ctx}: ctor does not accept kwargs: {extra}")


BUILTIN_PROVIDERS: dict[str, Constructor] = {
    CONSTRUCTOR_BASED_PROVIDER: ConstructorBasedProvider,
}

BUILTIN_STRATEGIES: dict[str, Constructor] = {
    cls.strategy_name: cls
    for cls in (
        NoConstraintChecker,
        TWiseParameterCombinationFactory,
        StrengthBasedParameterOrder,
        NoOpReporter,
        LoggingReporter,
    )
}
