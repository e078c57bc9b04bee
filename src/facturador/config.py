# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Facturador Insight.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating the business policies it carries (fixed-cost categories,
  projection horizon and growth, seasonality dampening),
- exposing typed dataclasses used by the rest of the application.
"""

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .baseline import DEFAULT_LOOKBACK_MONTHS
from .engine import DEFAULT_FIXED_CATEGORIES, CostPolicy
from .projection import DEFAULT_PROJECTION_MONTHS
from .records import EXPENSE_CATEGORIES
from .seasonality import SeasonalityDampening

DEFAULT_CONFIG_FILE = "facturador_config.toml"
DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "json", "both")


@dataclass(frozen=True)
class InputsConfig:
    """Where raw rows come from, and the externally known cash balance."""

    invoices: Optional[Path] = None
    expenses: Optional[Path] = None
    cash_balance: Optional[float] = None


@dataclass(frozen=True)
class ProjectionConfig:
    """Trailing window and forward horizon of the projections."""

    lookback_months: int = DEFAULT_LOOKBACK_MONTHS
    projection_months: int = DEFAULT_PROJECTION_MONTHS
    growth_factor_monthly: float = 1.0


@dataclass(frozen=True)
class DisplayConfig:
    mode: str = "table"
    ratio_decimals: int = 1


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Facturador Insight.

    This aggregates:
    - the business name and presentation currency,
    - the input locations and optional cash balance,
    - the fixed/variable cost policy,
    - the projection parameters,
    - the seasonality dampening bounds,
    - display and logging options.
    """

    business_name: str = ""
    currency: str = "PEN"
    inputs: InputsConfig = field(default_factory=InputsConfig)
    cost_policy: CostPolicy = field(default_factory=CostPolicy)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    dampening: SeasonalityDampening = field(default_factory=SeasonalityDampening)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = "WARNING"


def default_app_config() -> AppConfig:
    """Return the configuration used when no TOML file is available."""
    return AppConfig()


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_inputs(section: Mapping[str, Any], base_dir: Path) -> InputsConfig:
    def _resolve_optional(rel: Any) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    raw_cash = section.get("cash_balance")
    cash_balance: Optional[float]
    if raw_cash is None:
        cash_balance = None
    else:
        try:
            cash_balance = float(raw_cash)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                "Invalid value for 'inputs.cash_balance'. Expected a number."
            ) from exc

    return InputsConfig(
        invoices=_resolve_optional(section.get("invoices")),
        expenses=_resolve_optional(section.get("expenses")),
        cash_balance=cash_balance,
    )


def _parse_cost_policy(section: Mapping[str, Any]) -> CostPolicy:
    raw = section.get("fixed_categories")
    if raw is None:
        return CostPolicy(fixed_categories=DEFAULT_FIXED_CATEGORIES)

    if not isinstance(raw, list):
        raise ValueError("'costs.fixed_categories' must be a list of categories.")

    categories = {str(c).strip().lower() for c in raw}
    unknown = sorted(categories - set(EXPENSE_CATEGORIES))
    if unknown:
        raise ValueError(
            f"Unknown expense categories in 'costs.fixed_categories': {unknown}. "
            f"Expected any of: {list(EXPENSE_CATEGORIES)}."
        )
    return CostPolicy(fixed_categories=frozenset(categories))


def _parse_projection(section: Mapping[str, Any]) -> ProjectionConfig:
    try:
        lookback = int(section.get("lookback_months", DEFAULT_LOOKBACK_MONTHS))
        months = int(section.get("projection_months", DEFAULT_PROJECTION_MONTHS))
        growth = float(section.get("growth_factor_monthly", 1.0))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid [projection] values. Expected integers for lookback_months "
            "and projection_months and a number for growth_factor_monthly."
        ) from exc

    if months < 0:
        raise ValueError("'projection.projection_months' cannot be negative.")
    if growth <= 0:
        raise ValueError("'projection.growth_factor_monthly' must be positive.")

    return ProjectionConfig(
        lookback_months=lookback,
        projection_months=months,
        growth_factor_monthly=growth,
    )


def _parse_dampening(section: Mapping[str, Any]) -> SeasonalityDampening:
    defaults = SeasonalityDampening()
    try:
        dampening = SeasonalityDampening(
            high_threshold=float(section.get("high_threshold", defaults.high_threshold)),
            high_value=float(section.get("high_value", defaults.high_value)),
            low_threshold=float(section.get("low_threshold", defaults.low_threshold)),
            low_value=float(section.get("low_value", defaults.low_value)),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid [seasonality] values, expected numbers.") from exc

    if dampening.low_threshold > dampening.high_threshold:
        raise ValueError(
            "'seasonality.low_threshold' cannot be above 'seasonality.high_threshold'."
        )
    return dampening


def _parse_display(section: Mapping[str, Any]) -> DisplayConfig:
    mode = str(section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid 'display.mode' {mode!r}. Expected one of {list(DISPLAY_MODES)}."
        )
    try:
        ratio_decimals = int(section.get("ratio_decimals", 1))
    except (TypeError, ValueError):
        ratio_decimals = 1
    return DisplayConfig(mode=mode, ratio_decimals=ratio_decimals)


def _parse_log_level(section: Mapping[str, Any]) -> str:
    level = str(section.get("level", "WARNING")).upper()
    if level not in logging.getLevelNamesMapping():
        raise ValueError(f"Invalid 'logging.level' {level!r}.")
    return level


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Facturador Insight configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [business]
        Business name and presentation currency (default "PEN").

    [inputs]
        Paths of the invoice and expense exports, and an optional
        ``cash_balance``. When no cash balance is configured, the
        collected invoice total is used as the current cash.

    [costs]
        ``fixed_categories``: expense categories treated as fixed costs.

    [projection]
        ``lookback_months``, ``projection_months`` and
        ``growth_factor_monthly``.

    [seasonality]
        Dampening bounds (``high_threshold``, ``high_value``,
        ``low_threshold``, ``low_value``).

    [display]
        Display mode (table, csv, json, both) and ratio decimals.

    [logging]
        Log level used by the CLI.

    All sections are optional. File paths are resolved relative to the
    directory of the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        ``facturador_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    business = _section(raw, "business")

    return AppConfig(
        business_name=str(business.get("name") or ""),
        currency=str(business.get("currency") or "PEN"),
        inputs=_parse_inputs(_section(raw, "inputs"), base_dir),
        cost_policy=_parse_cost_policy(_section(raw, "costs")),
        projection=_parse_projection(_section(raw, "projection")),
        dampening=_parse_dampening(_section(raw, "seasonality")),
        display=_parse_display(_section(raw, "display")),
        log_level=_parse_log_level(_section(raw, "logging")),
    )
