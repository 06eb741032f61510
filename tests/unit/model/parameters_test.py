from __future__ import annotations

import pytest

from combinatorial_strategy_engine.model.parameters import InputParameterModel

_INVALID_CASES = [
    dict(id="negative-strength", kwargs=dict(strength=-1, parameter_sizes=(2, 2)), exp="non-negative int"),
    dict(id="strength-too-high", kwargs=dict(strength=3, parameter_sizes=(2, 2)), exp="exceeds number of parameters 2"),
    dict(id="empty-parameter", kwargs=dict(strength=1, parameter_sizes=(2, 0)), exp="parameters without values: [1]"),
    dict(
        id="tuple-width",
        kwargs=dict(strength=1, parameter_sizes=(2, 2), forbidden_tuples=((0,),)),
        exp="has 1 entries, expected 2",
    ),
    dict(
        id="tuple-not-sequence",
        kwargs=dict(strength=1, parameter_sizes=(2, 2), error_tuples=(5,)),
        exp="error_tuples: expected a sequence of ints",
    ),
]


@pytest.mark.parametrize("case", _INVALID_CASES, ids=[c["id"] for c in _INVALID_CASES])
def test_invalid_models(case: dict) -> None:
    with pytest.raises(ValueError) as ei:
        InputParameterModel(**case["kwargs"])
    assert case["exp"] in str(ei.value)


def test_model_normalizes_sequences_and_compares_by_value() -> None:
    a = InputParameterModel(strength=2, parameter_sizes=[2, 3], forbidden_tuples=[[0, -1]])
    b = InputParameterModel(strength=2, parameter_sizes=(2, 3), forbidden_tuples=((0, -1),))

    assert a == b
    assert hash(a) == hash(b)
    assert a.number_of_parameters == 2


def test_mapping_round_trip() -> None:
    model = InputParameterModel(
        strength=1, parameter_sizes=(2, 2), error_tuples=((1, -1),), name="login"
    )
    mapping = model.to_mapping()

    assert mapping == {
        "strength": 1,
        "parameter_sizes": [2, 2],
        "error_tuples": [[1, -1]],
        "name": "login",
    }
    assert InputParameterModel.from_mapping(mapping) == model
