# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard aggregation for Vendor Desk.

Every function in this module is a pure read-side derivation over loaded
records (see ``store.AppState``). Nothing is cached: results are recomputed
from the current data on every call.

Period membership
-----------------
A record belongs to a month when its ISO date text starts with the month key
("YYYY-MM"). Missing or malformed dates never match any month, and missing
amounts count as 0. Because a date has exactly one prefix, an entry is
counted in one month at most.

Outputs
-------
Scalar KPIs are returned as plain numbers. Chart data is returned as pandas
DataFrames:

- ``sales_by_software``       : columns ``name``, ``value``
- ``revenue_expense_series``  : columns ``period``, ``label``, ``revenue``,
                                ``expense``
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import pandas as pd

from . import periods
from .errors import DomainRuleError
from .models import (
    Client,
    FinancialEntry,
    MonthlyFee,
    Occurrence,
    SoftwareLicense,
)
from .occurrences import is_open, is_overdue
from .periods import Period, trailing_periods

if TYPE_CHECKING:
    from .store import AppState

ENTRY_COLUMNS = [
    "id",
    "type",
    "description",
    "category",
    "value",
    "date",
    "client_id",
    "license_id",
]


def _iso_text(value: object) -> str:
    """Dates that are not text are treated as empty (never in any period)."""
    return value if isinstance(value, str) else ""


def _round_money(value: float) -> float:
    return round(float(value), 2)


def entries_frame(entries: Iterable[FinancialEntry]) -> pd.DataFrame:
    """
    Convert ledger entries into a DataFrame.

    ``date`` is always text (empty when missing) and ``value`` always a
    float (0 when missing).
    """
    records = [
        {
            "id": e.id,
            "type": e.type,
            "description": e.description,
            "category": e.category,
            "value": e.value,
            "date": _iso_text(e.date),
            "client_id": e.client_id,
            "license_id": e.license_id,
        }
        for e in entries
    ]
    df = pd.DataFrame.from_records(records, columns=ENTRY_COLUMNS)
    df["value"] = pd.to_numeric(df["value"], errors="coerce").fillna(0.0).astype(float)
    df["date"] = df["date"].fillna("").astype(str)
    return df


def _period_sum(df: pd.DataFrame, entry_type: str, period: Period) -> float:
    if df.empty:
        return 0.0
    mask = (df["type"] == entry_type) & df["date"].str.startswith(period.key)
    return _round_money(df.loc[mask, "value"].sum())


def monthly_total(
    entries: Iterable[FinancialEntry],
    entry_type: str,
    period: Period,
) -> float:
    """Sum of ``value`` over entries of ``entry_type`` dated within ``period``."""
    return _period_sum(entries_frame(entries), entry_type, period)


def new_clients_count(clients: Iterable[Client], period: Period) -> int:
    """Number of clients created within ``period``."""
    return sum(1 for c in clients if period.contains(c.created_at))


def open_occurrences_count(occurrences: Iterable[Occurrence]) -> int:
    """Number of occurrences with status "open" or "in-progress"."""
    return sum(1 for o in occurrences if is_open(o))


def overdue_occurrences_count(
    occurrences: Iterable[Occurrence],
    now: Optional[datetime] = None,
) -> int:
    """Number of pending occurrences whose deadline has passed."""
    ref = now or periods._now()
    return sum(1 for o in occurrences if is_overdue(o, ref))


def sales_by_software(
    clients: Iterable[Client],
    period: Period,
    default_names: Sequence[str] = ("ERP", "CRM"),
) -> pd.DataFrame:
    """
    Count the licenses sold within ``period`` per software name.

    Returned licenses are never counted, whatever their acquisition date.
    When nothing was sold, one zero row per name of ``default_names`` is
    returned so that charts always have something to draw.

    Returns
    -------
    pandas.DataFrame
        Columns ``name`` and ``value``, sorted by decreasing count then
        by name.
    """
    names = [
        lic.software_name
        for client in clients
        for lic in client.licenses
        if not lic.returned and period.contains(lic.acquisition_date)
    ]

    if not names:
        return pd.DataFrame({"name": list(default_names), "value": [0] * len(default_names)})

    counts = pd.Series(names, dtype=object).value_counts()
    out = counts.rename_axis("name").reset_index(name="value")
    out["value"] = out["value"].astype(int)
    return out.sort_values(["value", "name"], ascending=[False, True]).reset_index(drop=True)


def revenue_expense_series(
    entries: Iterable[FinancialEntry],
    months: int = 6,
    reference: Optional[date] = None,
) -> pd.DataFrame:
    """
    Revenue and expense totals of the ``months`` calendar months ending with
    the reference month (today by default), oldest first.

    Each month is recomputed independently from the full entry list.
    """
    df = entries_frame(entries)
    rows = []
    for period in trailing_periods(months, reference):
        rows.append(
            {
                "period": period.key,
                "label": period.label,
                "revenue": _period_sum(df, "revenue", period),
                "expense": _period_sum(df, "expense", period),
            }
        )
    return pd.DataFrame(rows, columns=["period", "label", "revenue", "expense"])


@dataclass(frozen=True)
class LedgerTotals:
    revenue: float
    expense: float

    @property
    def balance(self) -> float:
        return _round_money(self.revenue - self.expense)


def ledger_totals(
    entries: Iterable[FinancialEntry],
    entry_type: Optional[str] = None,
) -> LedgerTotals:
    """
    Totals over every entry regardless of date.

    With ``entry_type``, only entries of that type are summed; the other
    total is then 0.
    """
    df = entries_frame(entries)
    if entry_type is not None:
        df = df[df["type"] == entry_type]
    by_type = df.groupby("type")["value"].sum()
    return LedgerTotals(
        revenue=_round_money(by_type.get("revenue", 0.0)),
        expense=_round_money(by_type.get("expense", 0.0)),
    )


@dataclass(frozen=True)
class DashboardSummary:
    """KPIs and chart data of the dashboard for one month."""

    period: Period
    revenue: float
    expense: float
    new_clients: int
    open_occurrences: int
    overdue_occurrences: int
    sales: pd.DataFrame
    series: pd.DataFrame

    @property
    def balance(self) -> float:
        return _round_money(self.revenue - self.expense)


def dashboard_summary(
    state: AppState,
    period: Optional[Period] = None,
    *,
    now: Optional[datetime] = None,
    default_names: Sequence[str] = ("ERP", "CRM"),
    months: int = 6,
) -> DashboardSummary:
    """
    Compute every dashboard KPI for ``period`` (current month by default).

    The revenue/expense series ends with the current month, independently
    of ``period``.
    """
    ref = now or periods._now()
    selected = period or Period(year=ref.year, month=ref.month)
    df = entries_frame(state.financial_entries)
    return DashboardSummary(
        period=selected,
        revenue=_period_sum(df, "revenue", selected),
        expense=_period_sum(df, "expense", selected),
        new_clients=new_clients_count(state.clients, selected),
        open_occurrences=open_occurrences_count(state.occurrences),
        overdue_occurrences=overdue_occurrences_count(state.occurrences, ref),
        sales=sales_by_software(state.clients, selected, default_names),
        series=revenue_expense_series(state.financial_entries, months, ref.date()),
    )


@dataclass(frozen=True)
class ClientOverview:
    """Everything recorded about one client."""

    client: Client
    licenses: tuple[SoftwareLicense, ...]
    monthly_fees: tuple[MonthlyFee, ...]
    occurrences: tuple[Occurrence, ...]
    entries: tuple[FinancialEntry, ...]

    @property
    def active_licenses(self) -> tuple[SoftwareLicense, ...]:
        return tuple(lic for lic in self.licenses if not lic.returned)

    @property
    def monthly_fees_total(self) -> float:
        return _round_money(sum(f.value for f in self.monthly_fees if f.active))

    @property
    def revenue_total(self) -> float:
        return ledger_totals(self.entries, "revenue").revenue


def client_overview(state: AppState, client_id: int) -> ClientOverview:
    """
    Gather the licenses, fees, tickets and ledger entries of a client.

    Raises
    ------
    DomainRuleError
        If the client does not exist.
    """
    client = state.client(client_id)
    if client is None:
        raise DomainRuleError(f"Unknown client #{client_id}.")
    return ClientOverview(
        client=client,
        licenses=client.licenses,
        monthly_fees=client.monthly_fees,
        occurrences=tuple(o for o in state.occurrences if o.client_id == client_id),
        entries=tuple(e for e in state.financial_entries if e.client_id == client_id),
    )
