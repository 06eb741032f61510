from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from combinatorial_strategy_engine.internal.builtin_strategies import (
    NoConstraintChecker,
    NoOpReporter,
    StrengthBasedParameterOrder,
    TWiseParameterCombinationFactory,
)
from combinatorial_strategy_engine.model.parameters import InputParameterModel
from combinatorial_strategy_engine.strategies import (
    ConstraintChecker,
    ParameterCombinationFactory,
    ParameterOrder,
    Reporter,
)


class ConfigurationError(RuntimeError):
    pass


class MissingRequiredValueError(ConfigurationError):
    """A required slot was never set and has no default."""

    def __init__(self, role: StrategyRole) -> None:
        super().__init__(f"required strategy '{role.value}' was not set")
        self.role = role


class InvalidValueError(ConfigurationError):
    """A slot was explicitly set to None, or holds a value that cannot be hashed."""

    def __init__(self, role: StrategyRole, reason: str = "was explicitly set to None") -> None:
        super().__init__(f"strategy '{role.value}' {reason}")
        self.role = role


class StrategyRole(str, Enum):
    """
    The five pluggable strategies of an IPOG run.

    MODEL: the input parameter model (required, no default).
    CONSTRAINT_CHECKER: validates candidate combinations.
    COMBINATION_FACTORY: enumerates combinations to cover.
    PARAMETER_ORDER: orders parameters for horizontal expansion.
    REPORTER: receives progress reports.
    """

    MODEL = "model"
    CONSTRAINT_CHECKER = "constraint_checker"
    COMBINATION_FACTORY = "combination_factory"
    PARAMETER_ORDER = "parameter_order"
    REPORTER = "reporter"

    @property
    def slot(self) -> StrategySlot:
        return STRATEGY_SLOTS[self]


@dataclass(frozen=True, slots=True)
class StrategySlot:
    role: StrategyRole
    interface: type
    default_factory: Callable[[], Any] | None = None

    @property
    def required(self) -> bool:
        return self.default_factory is None


STRATEGY_SLOTS: dict[StrategyRole, StrategySlot] = {
    StrategyRole.MODEL: StrategySlot(StrategyRole.MODEL, InputParameterModel),
    StrategyRole.CONSTRAINT_CHECKER: StrategySlot(
        StrategyRole.CONSTRAINT_CHECKER, ConstraintChecker, NoConstraintChecker
    ),
    StrategyRole.COMBINATION_FACTORY: StrategySlot(
        StrategyRole.COMBINATION_FACTORY,
        ParameterCombinationFactory,
        TWiseParameterCombinationFactory,
    ),
    StrategyRole.PARAMETER_ORDER: StrategySlot(
        StrategyRole.PARAMETER_ORDER, ParameterOrder, StrengthBasedParameterOrder
    ),
    StrategyRole.REPORTER: StrategySlot(StrategyRole.REPORTER, Reporter, NoOpReporter),
}


@dataclass(frozen=True, slots=True)
class IpogConfiguration:
    """
    Everything needed to construct an IPOG run, fully resolved.

    Instances are only created by ``IpogConfigurationBuilder.build()``; no
    field is ever None. Equality, hash and repr cover all five strategies, so
    every strategy must be hashable; ``build()`` rejects values that are not.
    """

    model: InputParameterModel
    checker: ConstraintChecker
    factory: ParameterCombinationFactory
    order: ParameterOrder
    reporter: Reporter

    def get(self, role: StrategyRole) -> Any:
        return getattr(self, _FIELD_BY_ROLE[role])

    def to_builder(self) -> IpogConfigurationBuilder:
        builder = IpogConfigurationBuilder()
        for role in StrategyRole:
            builder.with_slot(role, self.get(role))
        return builder


_FIELD_BY_ROLE: dict[StrategyRole, str] = {
    StrategyRole.MODEL: "model",
    StrategyRole.CONSTRAINT_CHECKER: "checker",
    StrategyRole.COMBINATION_FACTORY: "factory",
    StrategyRole.PARAMETER_ORDER: "order",
    StrategyRole.REPORTER: "reporter",
}


class IpogConfigurationBuilder:
    """
    Mutable accumulator for an IpogConfiguration.

    Setters accept any value, including None, and return the builder. All
    validation happens in ``build()``. A builder is owned by one caller and
    is not safe to mutate from several threads.
    """

    def __init__(self) -> None:
        self._values: dict[StrategyRole, Any] = {}

    def with_slot(self, role: StrategyRole | str, value: Any) -> IpogConfigurationBuilder:
        self._values[StrategyRole(role)] = value
        return self

    def model(self, model: InputParameterModel | None) -> IpogConfigurationBuilder:
        return self.with_slot(StrategyRole.MODEL, model)

    def checker(self, checker: ConstraintChecker | None) -> IpogConfigurationBuilder:
        return self.with_slot(StrategyRole.CONSTRAINT_CHECKER, checker)

    def factory(self, factory: ParameterCombinationFactory | None) -> IpogConfigurationBuilder:
        return self.with_slot(StrategyRole.COMBINATION_FACTORY, factory)

    def order(self, order: ParameterOrder | None) -> IpogConfigurationBuilder:
        return self.with_slot(StrategyRole.PARAMETER_ORDER, order)

    def reporter(self, reporter: Reporter | None) -> IpogConfigurationBuilder:
        return self.with_slot(StrategyRole.REPORTER, reporter)

    def is_set(self, role: StrategyRole | str) -> bool:
        return StrategyRole(role) in self._values

    def build(self) -> IpogConfiguration:
        """
        Apply defaults and validate every slot, then return a new configuration.

        Raises:
            InvalidValueError: a slot was explicitly set to None or is not hashable.
            MissingRequiredValueError: the model was never set.
        """
        resolved: dict[str, Any] = {}
        for role, slot in STRATEGY_SLOTS.items():
            if role in self._values:
                value = self._values[role]
                if value is None:
                    raise InvalidValueError(role)
                try:
                    hash(value)
                except TypeError as e:
                    raise InvalidValueError(role, f"is not hashable: {e}") from e
            elif slot.default_factory is not None:
                value = slot.default_factory()
                logging.debug(f"strategy '{role.value}' not set, using default {value!r}")
            else:
                raise MissingRequiredValueError(role)
            resolved[_FIELD_BY_ROLE[role]] = value

        return IpogConfiguration(**resolved)


def ipog_configuration() -> IpogConfigurationBuilder:
    return IpogConfigurationBuilder()
