from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from typing_extensions import Self

Combination = tuple[int, ...]


def _as_tuples(desc: str, values: Sequence[Sequence[int]]) -> tuple[Combination, ...]:
    out: list[Combination] = []
    for v in values:
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"{desc}: expected a sequence of ints, got {type(v).__name__}")
        out.append(tuple(int(x) for x in v))
    return tuple(out)


@dataclass(frozen=True, slots=True)
class InputParameterModel:
    """
    The parameter domain a covering array must cover.

    Parameters are identified by their index; each parameter has
    ``parameter_sizes[i]`` values, identified by index as well. Forbidden and
    error tuples use ``-1`` for "any value" at positions they do not constrain.

    Attributes:
        strength: Interaction strength t of the covering array.
        parameter_sizes: Number of values of each parameter.
        forbidden_tuples: Combinations no generated test input may contain.
        error_tuples: Combinations which are expected to trigger an error.
        name: Optional human-readable name used in diagnostics.
    """

    strength: int
    parameter_sizes: tuple[int, ...]
    forbidden_tuples: tuple[Combination, ...] = ()
    error_tuples: tuple[Combination, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameter_sizes", tuple(self.parameter_sizes))
        object.__setattr__(
            self, "forbidden_tuples", _as_tuples("forbidden_tuples", self.forbidden_tuples)
        )
        object.__setattr__(self, "error_tuples", _as_tuples("error_tuples", self.error_tuples))

        if not isinstance(self.strength, int) or self.strength < 0:
            raise ValueError(f"strength must be a non-negative int, got {self.strength!r}")
        if self.strength > len(self.parameter_sizes):
            raise ValueError(
                f"strength {self.strength} exceeds number of parameters {len(self.parameter_sizes)}"
            )
        bad = [i for i, size in enumerate(self.parameter_sizes) if size < 1]
        if bad:
            raise ValueError(f"parameters without values: {bad}")

        width = len(self.parameter_sizes)
        for combination in self.forbidden_tuples + self.error_tuples:
            if len(combination) != width:
                raise ValueError(
                    f"tuple {combination} has {len(combination)} entries, expected {width}"
                )

    @property
    def number_of_parameters(self) -> int:
        return len(self.parameter_sizes)

    def to_mapping(self) -> dict[str, Any]:
        mapping: dict[str, Any] = {
            "strength": self.strength,
            "parameter_sizes": list(self.parameter_sizes),
        }
        if self.forbidden_tuples:
            mapping["forbidden_tuples"] = [list(t) for t in self.forbidden_tuples]
        if self.error_tuples:
            mapping["error_tuples"] = [list(t) for t in self.error_tuples]
        if self.name:
            mapping["name"] = self.name
        return mapping

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Self:
        return cls(
            strength=mapping["strength"],
            parameter_sizes=tuple(mapping["parameter_sizes"]),
            forbidden_tuples=tuple(mapping.get("forbidden_tuples", ())),
            error_tuples=tuple(mapping.get("error_tuples", ())),
            name=mapping.get("name", ""),
        )
