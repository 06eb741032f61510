from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import ClassVar

from combinatorial_strategy_engine.model.parameters import Combination
from combinatorial_strategy_engine.model.reports import Report, ReportLevel
from combinatorial_strategy_engine.strategies import (
    ConstraintChecker,
    ParameterCombinationFactory,
    ParameterOrder,
    Reporter,
)

# Builtin strategies are stateless, so instances with equal fields compare and hash equal.


@dataclass(frozen=True, slots=True)
class NoConstraintChecker(ConstraintChecker):
    strategy_name: ClassVar[str] = "no-constraints"

    def is_valid(self, combination: Combination) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class TWiseParameterCombinationFactory(ParameterCombinationFactory):
    """
    Standard t-wise coverage: every (t-1)-subset of the already covered
    parameters combined with the next parameter.

    Returned combinations are tuples of parameter indices, with the new
    parameter last.
    """

    strategy_name: ClassVar[str] = "t-wise"

    def create(
        self, old_parameters: Sequence[int], next_parameter: int, strength: int
    ) -> list[tuple[int, ...]]:
        if strength < 1:
            return []
        size = min(strength - 1, len(old_parameters))
        return [
            (*combination, next_parameter)
            for combination in itertools.combinations(old_parameters, size)
        ]


@dataclass(frozen=True, slots=True)
class StrengthBasedParameterOrder(ParameterOrder):
    """
    The first ``strength`` parameters form the initial array; all others are
    added one at a time in ascending index order.
    """

    strategy_name: ClassVar[str] = "strength-based"

    def initial_parameters(
        self, parameters: Mapping[int, int], strength: int
    ) -> tuple[int, ...]:
        return tuple(sorted(parameters)[: max(strength, 0)])

    def remaining_parameters(
        self, parameters: Mapping[int, int], strength: int
    ) -> tuple[int, ...]:
        return tuple(sorted(parameters)[max(strength, 0):])


@dataclass(frozen=True, slots=True)
class NoOpReporter(Reporter):
    strategy_name: ClassVar[str] = "no-op"

    def report(self, level: ReportLevel, report: Report) -> None:
        return None

    def report_lazy(self, level: ReportLevel, supplier: Callable[[], Report]) -> None:
        # supplier is intentionally never called
        return None


@dataclass(frozen=True, slots=True)
class LoggingReporter(Reporter):
    """
    Forwards reports to a stdlib logger.

    Reports below ``min_level`` are dropped. Lazy suppliers are only called
    when the report would actually be emitted.
    """

    strategy_name: ClassVar[str] = "logging"

    logger_name: str = "combinatorial_strategy_engine.reports"
    min_level: ReportLevel = ReportLevel.INFO

    def __post_init__(self) -> None:
        if isinstance(self.min_level, str):
            try:
                object.__setattr__(self, "min_level", ReportLevel(self.min_level.lower()))
            except ValueError as e:
                raise ValueError(f"min_level: invalid value '{self.min_level}'") from e

    def _enabled(self, level: ReportLevel) -> bool:
        if not level.is_worse_than_or_equal_to(self.min_level):
            return False
        return logging.getLogger(self.logger_name).isEnabledFor(level.logging_level)

    def report(self, level: ReportLevel, report: Report) -> None:
        if self._enabled(level):
            logging.getLogger(self.logger_name).log(level.logging_level, report.resolve())

    def report_lazy(self, level: ReportLevel, supplier: Callable[[], Report]) -> None:
        if self._enabled(level):
            self.report(level, supplier())
