from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any

import pytest

from combinatorial_strategy_engine.configuration import (
    STRATEGY_SLOTS,
    InvalidValueError,
    IpogConfiguration,
    IpogConfigurationBuilder,
    MissingRequiredValueError,
    StrategyRole,
    ipog_configuration,
)
from combinatorial_strategy_engine.internal.builtin_strategies import (
    NoConstraintChecker,
    NoOpReporter,
    StrengthBasedParameterOrder,
    TWiseParameterCombinationFactory,
)
from combinatorial_strategy_engine.strategies import ConstraintChecker
from unit.helpers.strategies_helper import (
    FakeChecker,
    FakeFactory,
    FakeOrder,
    RecordingReporter,
    make_model,
)

_OPTIONAL_ROLES = [r for r in StrategyRole if r is not StrategyRole.MODEL]

_FAKES: dict[StrategyRole, Any] = {
    StrategyRole.CONSTRAINT_CHECKER: FakeChecker("explicit"),
    StrategyRole.COMBINATION_FACTORY: FakeFactory("explicit"),
    StrategyRole.PARAMETER_ORDER: FakeOrder("explicit"),
    StrategyRole.REPORTER: RecordingReporter(),
}

_DEFAULTS: dict[StrategyRole, Any] = {
    StrategyRole.CONSTRAINT_CHECKER: NoConstraintChecker(),
    StrategyRole.COMBINATION_FACTORY: TWiseParameterCombinationFactory(),
    StrategyRole.PARAMETER_ORDER: StrengthBasedParameterOrder(),
    StrategyRole.REPORTER: NoOpReporter(),
}

# every subset of optional roles that is set explicitly
_SUBSETS = [
    subset
    for n in range(len(_OPTIONAL_ROLES) + 1)
    for subset in itertools.combinations(_OPTIONAL_ROLES, n)
]


# ==============================================================================
# slots
# ==============================================================================


def test_model_is_the_only_required_slot() -> None:
    required = [role for role, slot in STRATEGY_SLOTS.items() if slot.required]
    assert required == [StrategyRole.MODEL]
    assert set(STRATEGY_SLOTS) == set(StrategyRole)


def test_role_slot_property_matches_table() -> None:
    for role in StrategyRole:
        assert role.slot is STRATEGY_SLOTS[role]
        assert role.slot.role is role


# ==============================================================================
# build(): defaults
# ==============================================================================


@pytest.mark.parametrize("explicit", _SUBSETS, ids=lambda s: "+".join(r.value for r in s) or "model-only")
def test_build_applies_defaults_for_unset_slots(explicit: tuple[StrategyRole, ...]) -> None:
    builder = ipog_configuration().model(make_model())
    for role in explicit:
        builder.with_slot(role, _FAKES[role])

    config = builder.build()

    assert config.model == make_model()
    for role in _OPTIONAL_ROLES:
        expected = _FAKES[role] if role in explicit else _DEFAULTS[role]
        assert config.get(role) == expected


def test_build_with_fluent_setters() -> None:
    reporter = RecordingReporter()
    config = (
        IpogConfigurationBuilder()
        .model(make_model())
        .checker(FakeChecker())
        .factory(FakeFactory())
        .order(FakeOrder())
        .reporter(reporter)
        .build()
    )
    assert config.checker == FakeChecker()
    assert config.factory == FakeFactory()
    assert config.order == FakeOrder()
    assert config.reporter is reporter


def test_last_write_wins() -> None:
    config = (
        ipog_configuration()
        .model(make_model(strength=1))
        .model(make_model(strength=3))
        .checker(FakeChecker("first"))
        .checker(FakeChecker("second"))
        .build()
    )
    assert config.model.strength == 3
    assert config.checker == FakeChecker("second")


def test_with_slot_accepts_role_names() -> None:
    config = ipog_configuration().with_slot("model", make_model()).build()
    assert config.model == make_model()

    with pytest.raises(ValueError):
        ipog_configuration().with_slot("no-such-role", object())


# ==============================================================================
# build(): errors
# ==============================================================================


def test_build_without_model_fails_with_missing_required_value() -> None:
    builder = ipog_configuration().checker(FakeChecker())
    with pytest.raises(MissingRequiredValueError) as ei:
        builder.build()
    assert ei.value.role is StrategyRole.MODEL
    assert "required strategy 'model' was not set" in str(ei.value)


@pytest.mark.parametrize("role", list(StrategyRole), ids=lambda r: r.value)
def test_build_with_explicit_none_fails_with_invalid_value(role: StrategyRole) -> None:
    builder = ipog_configuration().model(make_model())
    builder.with_slot(role, None)

    with pytest.raises(InvalidValueError) as ei:
        builder.build()
    assert ei.value.role is role
    assert f"strategy '{role.value}' was explicitly set to None" in str(ei.value)


@dataclass
class _MutableChecker(ConstraintChecker):
    label: str = "mutable"

    def is_valid(self, combination) -> bool:
        return True


def test_build_rejects_unhashable_strategy() -> None:
    builder = ipog_configuration().model(make_model()).checker(_MutableChecker())

    with pytest.raises(InvalidValueError) as ei:
        builder.build()
    assert ei.value.role is StrategyRole.CONSTRAINT_CHECKER
    assert "strategy 'constraint_checker' is not hashable" in str(ei.value)
    assert isinstance(ei.value.__cause__, TypeError)


def test_setters_do_not_validate() -> None:
    builder = ipog_configuration().model(None).reporter(None)
    assert builder.is_set(StrategyRole.MODEL)
    assert builder.is_set("reporter")
    assert not builder.is_set(StrategyRole.CONSTRAINT_CHECKER)


# ==============================================================================
# value semantics
# ==============================================================================


def test_equal_slot_values_give_equal_configurations() -> None:
    a = ipog_configuration().model(make_model()).checker(FakeChecker("x")).build()
    b = ipog_configuration().model(make_model()).checker(FakeChecker("x")).build()

    assert a == b
    assert hash(a) == hash(b)


def test_different_slot_values_give_different_configurations() -> None:
    a = ipog_configuration().model(make_model()).checker(FakeChecker("x")).build()
    b = ipog_configuration().model(make_model()).checker(FakeChecker("y")).build()
    assert a != b


def test_string_form_lists_all_five_slots() -> None:
    config = ipog_configuration().model(make_model()).order(FakeOrder("shown")).build()
    text = str(config)

    assert text.startswith("IpogConfiguration(")
    for name in ("model=", "checker=", "factory=", "order=", "reporter="):
        assert name in text
    assert repr(make_model()) in text
    assert repr(NoConstraintChecker()) in text
    assert repr(TWiseParameterCombinationFactory()) in text
    assert repr(FakeOrder("shown")) in text
    assert repr(NoOpReporter()) in text


def test_configuration_is_immutable() -> None:
    config = ipog_configuration().model(make_model()).build()
    with pytest.raises(AttributeError):
        config.checker = FakeChecker()  # type: ignore[misc]


def test_build_is_repeatable_and_reflects_state_at_call_time() -> None:
    builder = ipog_configuration().model(make_model())
    first = builder.build()
    builder.checker(FakeChecker("later"))
    second = builder.build()

    assert first is not second
    assert first.checker == NoConstraintChecker()
    assert second.checker == FakeChecker("later")


def test_to_builder_round_trips() -> None:
    config = ipog_configuration().model(make_model()).factory(FakeFactory("f")).build()
    rebuilt = config.to_builder().build()
    assert rebuilt == config
    assert isinstance(rebuilt, IpogConfiguration)
