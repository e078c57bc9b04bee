from pathlib import Path

import pytest

from facturador.config import default_app_config, load_app_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "facturador_config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_full_config(tmp_path) -> None:
    path = _write(
        tmp_path,
        """
[business]
name = "Mi Empresa SAC"
currency = "USD"

[inputs]
invoices = "data/invoices.csv"
expenses = "data/expenses.json"
cash_balance = 15000

[costs]
fixed_categories = ["personal", "Marketing"]

[projection]
lookback_months = 3
projection_months = 6
growth_factor_monthly = 1.02

[seasonality]
high_threshold = 3.0
low_value = 0.4

[display]
mode = "json"
ratio_decimals = 2

[logging]
level = "debug"
""",
    )
    config = load_app_config(str(path))

    assert config.business_name == "Mi Empresa SAC"
    assert config.currency == "USD"
    assert config.inputs.invoices == (tmp_path / "data" / "invoices.csv").resolve()
    assert config.inputs.expenses == (tmp_path / "data" / "expenses.json").resolve()
    assert config.inputs.cash_balance == 15000.0
    assert config.cost_policy.fixed_categories == frozenset({"personal", "marketing"})
    assert config.projection.lookback_months == 3
    assert config.projection.projection_months == 6
    assert config.projection.growth_factor_monthly == pytest.approx(1.02)
    assert config.dampening.high_threshold == 3.0
    assert config.dampening.high_value == 2.0
    assert config.dampening.low_value == 0.4
    assert config.display.mode == "json"
    assert config.display.ratio_decimals == 2
    assert config.log_level == "DEBUG"


def test_empty_config_uses_defaults(tmp_path) -> None:
    config = load_app_config(str(_write(tmp_path, "")))
    defaults = default_app_config()

    assert config.currency == "PEN"
    assert config.inputs.invoices is None
    assert config.inputs.cash_balance is None
    assert config.cost_policy == defaults.cost_policy
    assert config.projection == defaults.projection
    assert config.dampening == defaults.dampening
    assert config.display.mode == "table"
    assert config.log_level == "WARNING"


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_invalid_toml_raises(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write(tmp_path, "[projection\nlookback_months = 3")))


@pytest.mark.parametrize(
    "text",
    [
        '[costs]\nfixed_categories = ["personal", "viajes"]',
        '[costs]\nfixed_categories = "personal"',
        "[projection]\ngrowth_factor_monthly = 0",
        "[projection]\nprojection_months = -1",
        '[projection]\nlookback_months = "seis"',
        "[seasonality]\nlow_threshold = 3.0\nhigh_threshold = 2.0",
        '[display]\nmode = "pdf"',
        '[logging]\nlevel = "chatty"',
        '[inputs]\ncash_balance = "mucho"',
    ],
)
def test_invalid_values_raise(tmp_path, text) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write(tmp_path, text)))


def test_default_file_in_current_directory(tmp_path, monkeypatch) -> None:
    _write(tmp_path, '[business]\nname = "Local"')
    monkeypatch.chdir(tmp_path)

    assert load_app_config().business_name == "Local"
