from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from combinatorial_strategy_engine.model.parameters import Combination
from combinatorial_strategy_engine.model.reports import Report, ReportLevel

StrategyType = TypeVar("StrategyType")


class ConstraintChecker(ABC):
    """
    Decides whether a (partial) test input may appear in the generated suite.

    Unassigned positions in a combination hold ``-1``.
    """

    @abstractmethod
    def is_valid(self, combination: Combination) -> bool: ...


class ParameterCombinationFactory(ABC):
    """
    Enumerates the parameter combinations IPOG must cover when it adds
    ``next_parameter`` to a suite that already covers ``old_parameters``.
    """

    @abstractmethod
    def create(
        self, old_parameters: Sequence[int], next_parameter: int, strength: int
    ) -> list[tuple[int, ...]]: ...


class ParameterOrder(ABC):
    """
    Orders parameters before horizontal expansion.

    ``parameters`` maps a parameter index to its number of values.
    """

    @abstractmethod
    def initial_parameters(
        self, parameters: Mapping[int, int], strength: int
    ) -> tuple[int, ...]: ...

    @abstractmethod
    def remaining_parameters(
        self, parameters: Mapping[int, int], strength: int
    ) -> tuple[int, ...]: ...


class Reporter(ABC):
    @abstractmethod
    def report(self, level: ReportLevel, report: Report) -> None: ...

    @abstractmethod
    def report_lazy(self, level: ReportLevel, supplier: Callable[[], Report]) -> None:
        """
        Report a message that is only built when it is actually needed.

        Implementations must not call ``supplier`` unless they emit the report.
        """
        ...


class StrategyProvider(Generic[StrategyType], ABC):
    """
    Produces a strategy for one test specification.

    Providers are constructed without arguments from a registry and may
    return ``None`` to decline.
    """

    @abstractmethod
    def provide(self, context: Any) -> StrategyType | None: ...


class ParameterConsumer(ABC):
    """
    Implemented by providers that take initialization parameters from the
    marker that named them. ``accept`` is called once, before ``provide``.
    """

    @abstractmethod
    def accept(self, parameters: Mapping[str, Any]) -> None: ...
