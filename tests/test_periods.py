import argparse
from datetime import date, datetime, timezone

import pytest

import vendordesk.periods as periods


def fixed_now(monkeypatch, value=datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc)):
    monkeypatch.setattr(periods, "_now", lambda: value)
    return value


def test_period_key_and_label() -> None:
    p = periods.Period(year=2026, month=2)

    assert p.key == "2026-02"
    assert str(p) == "2026-02"
    assert p.label == "Feb 2026"


def test_period_shift_crosses_year_boundaries() -> None:
    p = periods.Period(year=2026, month=1)

    assert p.shift(-1) == periods.Period(year=2025, month=12)
    assert p.shift(-13) == periods.Period(year=2024, month=12)
    assert p.shift(11) == periods.Period(year=2026, month=12)
    assert p.shift(12) == periods.Period(year=2027, month=1)


def test_period_contains_is_a_prefix_match() -> None:
    p = periods.Period(year=2026, month=10)

    assert p.contains("2026-10-01")
    assert p.contains("2026-10-31T23:59:59+00:00")
    assert not p.contains("2026-11-01")
    assert not p.contains("10/05/2026")
    assert not p.contains("")
    assert not p.contains(None)


def test_invalid_month_is_rejected() -> None:
    with pytest.raises(ValueError):
        periods.Period(year=2026, month=13)


@pytest.mark.parametrize("text", ["2026-1", "26-01", "2026/01", "2026-13", "abc"])
def test_parse_period_rejects_malformed_text(text) -> None:
    with pytest.raises(ValueError):
        periods.parse_period(text)


def test_trailing_periods_are_oldest_first() -> None:
    result = periods.trailing_periods(6, date(2026, 3, 10))

    assert [p.key for p in result] == [
        "2025-10",
        "2025-11",
        "2025-12",
        "2026-01",
        "2026-02",
        "2026-03",
    ]


def test_trailing_periods_default_to_today(monkeypatch) -> None:
    fixed_now(monkeypatch)

    assert [p.key for p in periods.trailing_periods(2)] == ["2025-12", "2026-01"]


def test_determine_period_from_args_priority(monkeypatch) -> None:
    fixed_now(monkeypatch)

    args = argparse.Namespace(period="2025-07", last_month=True)
    assert periods.determine_period_from_args(args).key == "2025-07"

    args = argparse.Namespace(period=None, last_month=True)
    assert periods.determine_period_from_args(args).key == "2025-12"

    args = argparse.Namespace()
    assert periods.determine_period_from_args(args).key == "2026-01"


def test_parse_timestamp_variants() -> None:
    utc = timezone.utc

    assert periods.parse_timestamp("2026-10-18") == datetime(2026, 10, 18, tzinfo=utc)
    assert periods.parse_timestamp("2026-10-18T08:00:00Z") == datetime(
        2026, 10, 18, 8, tzinfo=utc
    )
    assert periods.parse_timestamp("2026-10-18T08:00:00") == datetime(
        2026, 10, 18, 8, tzinfo=utc
    )
    assert periods.parse_timestamp("2026-10-18T08:00:00-03:00") == datetime(
        2026, 10, 18, 11, tzinfo=utc
    )
    assert periods.parse_timestamp("tomorrow") is None
    assert periods.parse_timestamp("") is None
    assert periods.parse_timestamp(None) is None


def test_now_iso_uses_the_module_clock(monkeypatch) -> None:
    fixed_now(monkeypatch)

    assert periods.now_iso() == "2026-01-15T10:30:00+00:00"
    assert periods.today() == date(2026, 1, 15)
    assert periods.current_period().key == "2026-01"
