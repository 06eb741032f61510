from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from combinatorial_strategy_engine.markers import StrategyMarker, declared_markers


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """
    Runtime metadata of a test specification.

    Opaque to the resolver: it is handed to providers unchanged.
    """

    test_name: str
    declaring_type: type | None = None
    test_function: Callable[..., Any] | None = None
    state: Mapping[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", MappingProxyType(dict(self.state)))


@dataclass(frozen=True)
class TestSpecification:
    """
    A test specification and the declarations it inherits markers from.

    Attributes:
        name: Identity of the declaration, used in diagnostics.
        markers: Markers attached directly to this declaration.
        enclosing: Enclosing or referenced declarations, searched after this
            one in the given order.
        context: Execution context handed to providers. Defaults to a context
            carrying only ``name``.
    """

    __test__ = False

    name: str
    markers: tuple[StrategyMarker, ...] = ()
    enclosing: tuple[TestSpecification, ...] = ()
    context: ExecutionContext | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "markers", tuple(self.markers))
        object.__setattr__(self, "enclosing", tuple(self.enclosing))
        if self.context is None:
            object.__setattr__(self, "context", ExecutionContext(test_name=self.name))

    def declaration_chain(self) -> Iterator[TestSpecification]:
        """
        Yield this declaration, then its enclosing declarations depth first.

        A declaration reachable along several paths is yielded once.
        """
        seen: set[int] = set()
        stack: list[TestSpecification] = [self]
        while stack:
            spec = stack.pop()
            if id(spec) in seen:
                continue
            seen.add(id(spec))
            yield spec
            stack.extend(reversed(spec.enclosing))

    @classmethod
    def of(
        cls,
        function: Callable[..., Any],
        declaring_type: type | None = None,
        *,
        state: Mapping[str, Any] | None = None,
    ) -> TestSpecification:
        """
        Build the specification of a decorated test function.

        The declaration chain is the function, then ``declaring_type`` and
        its bases in method resolution order (``object`` excluded).
        """
        enclosing: list[TestSpecification] = []
        if declaring_type is not None:
            for klass in inspect.getmro(declaring_type):
                if klass is object:
                    continue
                enclosing.append(
                    cls(name=klass.__qualname__, markers=declared_markers(klass))
                )

        name = getattr(function, "__qualname__", repr(function))
        context = ExecutionContext(
            test_name=name,
            declaring_type=declaring_type,
            test_function=function,
            state=state or {},
        )
        return cls(
            name=name,
            markers=declared_markers(function),
            enclosing=tuple(enclosing),
            context=context,
        )
