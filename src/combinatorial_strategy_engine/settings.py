from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypedDict

from combinatorial_strategy_engine.configuration import (
    IpogConfigurationBuilder,
    StrategyRole,
)
from combinatorial_strategy_engine.internal.registry import (
    ConstructorRegistry,
    build_strategy_registry,
)
from combinatorial_strategy_engine.internal.util.toml import load_toml_file, load_toml_text
from combinatorial_strategy_engine.internal.util.validation import validate_typed_dict
from combinatorial_strategy_engine.model.parameters import InputParameterModel


class SettingsError(ValueError):
    pass


class EngineSettings(TypedDict, total=False):
    """
    Top-level layout of a settings document.

      - model: table accepted by ``InputParameterModel.from_mapping``
      - strategies: role name -> StrategySettings
    """

    model: ModelSettings
    strategies: Mapping[str, StrategySettings]


class ModelSettings(TypedDict, total=False):
    """Keys of the [model] table; see ``InputParameterModel``."""

    strength: int
    parameter_sizes: list[int]
    forbidden_tuples: list[list[int]]
    error_tuples: list[list[int]]
    name: str


class StrategySettings(TypedDict, total=False):
    """
    Binds one role to a registered strategy.

    Reserved keys:
      - strategy_name: id of the strategy in the strategy registry

    Any additional keys are passed through to the strategy constructor.
    """

    strategy_name: str


def load_settings_text(text: str) -> EngineSettings:
    return _validated(load_toml_text(text))


def load_settings_file(path: str | Path) -> EngineSettings:
    return _validated(load_toml_file(path))


def _validated(raw: Mapping[str, Any]) -> EngineSettings:
    try:
        validate_typed_dict("settings", raw, EngineSettings, Mapping)
        validate_typed_dict("model", raw.get("model", {}), ModelSettings, object)
    except ValueError as e:
        raise SettingsError(str(e)) from e

    for role_name, cfg in raw.get("strategies", {}).items():
        try:
            role = StrategyRole(role_name)
        except ValueError as e:
            raise SettingsError(f"unknown strategy role '{role_name}'") from e
        if role is StrategyRole.MODEL:
            raise SettingsError("the model is configured in the [model] table, not as a strategy")
        if not isinstance(cfg, Mapping):
            raise SettingsError(f"strategies.{role_name} must be a table")
        name = cfg.get("strategy_name")
        if not isinstance(name, str) or not name:
            raise SettingsError(f"strategies.{role_name}.strategy_name must be a non-empty string")

    return EngineSettings(**raw)


def apply_settings(
    builder: IpogConfigurationBuilder,
    settings: EngineSettings,
    *,
    registry: ConstructorRegistry | None = None,
) -> IpogConfigurationBuilder:
    """
    Set every slot the settings mention on ``builder``.

    Slots not mentioned are left untouched, so the builder's own values or
    defaults still apply. All strategies are constructed before the builder
    is touched; on error the builder is unchanged.
    """
    staged: dict[StrategyRole, Any] = {}

    if "model" in settings:
        try:
            staged[StrategyRole.MODEL] = InputParameterModel.from_mapping(settings["model"])
        except (KeyError, TypeError, ValueError) as e:
            raise SettingsError(f"invalid [model] table: {e}") from e

    strategies = settings.get("strategies", {})
    if strategies and registry is None:
        registry = build_strategy_registry()

    for role_name, cfg in strategies.items():
        role = StrategyRole(role_name)
        staged[role] = _construct(role, cfg, registry)

    for role, value in staged.items():
        logging.debug(f"settings bind '{role.value}' to {value!r}")
        builder.with_slot(role, value)

    return builder


def _construct(role: StrategyRole, cfg: Mapping[str, Any], registry: ConstructorRegistry) -> Any:
    options = dict(cfg)
    strategy_name = options.pop("strategy_name")

    strategy_cls = registry.lookup(strategy_name)
    if strategy_cls is None:
        raise SettingsError(
            f"strategies.{role.value}: unknown strategy id {strategy_name!r}. "
            f"available={sorted(registry.merged())}"
        )
    try:
        strategy = strategy_cls(**options)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"strategies.{role.value}: {e}") from e

    interface = role.slot.interface
    if not isinstance(strategy, interface):
        raise SettingsError(
            f"strategies.{role.value}: strategy {strategy_name!r} is a "
            f"{type(strategy).__name__}, expected a {interface.__name__}"
        )
    return strategy
