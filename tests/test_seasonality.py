import pytest

from facturador.engine import MonthlyAggregate
from facturador.seasonality import (
    SeasonalityDampening,
    analyze_seasonality,
    neutral_seasonality,
)


def _agg(month: str, income: float) -> MonthlyAggregate:
    return MonthlyAggregate(month, income, 0.0, 0.0, 0.0)


def test_no_history_is_neutral() -> None:
    indices = analyze_seasonality([])

    assert sorted(indices) == list(range(1, 13))
    assert all(v == 1.0 for v in indices.values())
    assert indices == neutral_seasonality()


def test_zero_income_history_is_neutral() -> None:
    indices = analyze_seasonality([_agg("2024-01", 0.0), _agg("2024-02", 0.0)])
    assert indices == neutral_seasonality()


def test_flat_year_gives_unit_indices() -> None:
    aggregates = [_agg(f"2024-{m:02d}", 1000.0) for m in range(1, 13)]
    indices = analyze_seasonality(aggregates)
    assert all(v == pytest.approx(1.0) for v in indices.values())


def test_single_month_of_history_is_dampened() -> None:
    """One observed month dwarfs the zero-filled global average."""
    indices = analyze_seasonality([_agg("2024-03", 3000.0)])

    # raw index for March is 12.0 and is clamped to 2.0
    assert indices[3] == 2.0
    # every other month has a raw index of 0 and is raised to 0.5
    assert all(indices[m] == 0.5 for m in range(1, 13) if m != 3)


def test_moderate_indices_are_kept() -> None:
    aggregates = [_agg("2024-01", 2600.0)] + [
        _agg(f"2024-{m:02d}", 1000.0) for m in range(2, 13)
    ]
    indices = analyze_seasonality(aggregates)

    # global average = 13600 / 12
    assert indices[1] == pytest.approx(2.29)
    assert indices[2] == pytest.approx(0.88)


def test_same_calendar_month_is_pooled_across_years() -> None:
    aggregates = [_agg("2023-01", 1000.0), _agg("2024-01", 3000.0)] + [
        _agg(f"2023-{m:02d}", 2000.0) for m in range(2, 13)
    ]
    indices = analyze_seasonality(aggregates)

    # January averages to 2000, like every other month
    assert all(v == pytest.approx(1.0) for v in indices.values())


def test_indices_stay_within_dampening_bounds() -> None:
    aggregates = [
        _agg("2024-01", 50.0),
        _agg("2024-02", 400.0),
        _agg("2024-05", 9000.0),
        _agg("2024-08", 1200.0),
        _agg("2023-11", 700.0),
    ]
    indices = analyze_seasonality(aggregates)

    assert len(indices) == 12
    assert all(0.3 <= v <= 2.5 for v in indices.values())


def test_malformed_month_keys_are_skipped() -> None:
    indices = analyze_seasonality([_agg("garbage", 5000.0)])
    assert indices == neutral_seasonality()


def test_custom_dampening() -> None:
    dampening = SeasonalityDampening(
        high_threshold=1.5, high_value=1.5, low_threshold=0.9, low_value=0.9
    )
    indices = analyze_seasonality([_agg("2024-03", 3000.0)], dampening)

    assert indices[3] == 1.5
    assert indices[4] == 0.9


@pytest.mark.parametrize(
    "raw, expected",
    [(3.0, 2.0), (2.5, 2.5), (1.2, 1.2), (0.3, 0.3), (0.29, 0.5), (0.0, 0.5)],
)
def test_dampening_apply(raw, expected) -> None:
    assert SeasonalityDampening().apply(raw) == expected
