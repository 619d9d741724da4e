# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Vendor Desk.

This module reads financial entries from a CSV file (bank or spreadsheet
export) and normalizes them into a consistent structure that the store can
import into the ledger.

Expected input format
---------------------
Column names are case-insensitive:

    type, description, category, value, date
    [, due_date, payment_method, observation]

- ``type``:           "revenue" or "expense" (case-insensitive)
- ``description``:    free text label for the entry
- ``category``:       ledger category
- ``value``:          positive amount in monetary units
- ``date``:           date of the entry (YYYY-MM-DD)
- ``due_date``:       optional due date (YYYY-MM-DD)
- ``payment_method``: optional payment method
- ``observation``:    optional free text

The column ``label`` is accepted as an alias for ``description``.

Output schema
-------------
A pandas DataFrame with exactly these columns:

    - ``type``           (str, lowercase)
    - ``description``    (str)
    - ``category``       (str)
    - ``value``          (float)
    - ``date``           (str, YYYY-MM-DD)
    - ``due_date``       (str or None)
    - ``payment_method`` (str or None)
    - ``observation``    (str or None)

Any other columns present in the input file are ignored. Business rules
(value > 0, date not in the future, payment method list...) are checked
later by the validation layer, row by row.
"""

import os
from typing import Union

import pandas as pd

REQUIRED_COLUMNS = ("type", "description", "category", "value", "date")
OPTIONAL_COLUMNS = ("due_date", "payment_method", "observation")


def _text(raw: object) -> str:
    return "" if raw is None or pd.isna(raw) else str(raw).strip()


def _iso_dates(series: pd.Series, column: str, *, required: bool) -> pd.Series:
    """Parse a date column strictly and render it back as YYYY-MM-DD text."""
    values = []
    for raw in series:
        text = _text(raw)
        if not text:
            if required:
                raise ValueError(f"Missing values in '{column}' column.")
            values.append(None)
            continue
        try:
            values.append(pd.Timestamp(text).strftime("%Y-%m-%d"))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid values in '{column}' column.") from exc
    return pd.Series(values, index=series.index, dtype=object)


def _optional_text(series: pd.Series) -> pd.Series:
    return pd.Series([_text(v) or None for v in series], index=series.index, dtype=object)


def read_financial_entries(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """
    Read financial entries from a CSV file and normalize them.

    Parameters
    ----------
    path:
        Path to the CSV file.

    Returns
    -------
    pandas.DataFrame
        One row per entry with the columns listed in the module docstring.

    Raises
    ------
    ValueError
        If required columns are missing, if a type is neither "revenue" nor
        "expense", or if numeric/date parsing fails.
    """
    # Read everything as text; conversions are done column by column below
    df = pd.read_csv(path, dtype=str, keep_default_na=True)

    df.columns = [c.lower().strip() for c in df.columns]
    cols = set(df.columns)

    if "label" in cols and "description" not in cols:
        df = df.rename(columns={"label": "description"})
        cols = set(df.columns)

    missing = [c for c in REQUIRED_COLUMNS if c not in cols]
    if missing:
        raise ValueError(
            "Invalid financial entries structure. Missing column(s): "
            f"{', '.join(missing)}. Expected:\n"
            "  type, description, category, value, date"
            "[, due_date, payment_method, observation]\n"
            "(column names are case-insensitive; 'label' is accepted as an alias "
            "for 'description')."
        )

    d = df.copy()
    for col in OPTIONAL_COLUMNS:
        if col not in cols:
            d[col] = None

    d["type"] = d["type"].fillna("").astype(str).str.strip().str.lower()
    bad_types = sorted(set(d["type"]) - {"revenue", "expense"})
    if bad_types:
        raise ValueError(f"Invalid values in 'type' column: {', '.join(map(repr, bad_types))}.")

    d["value"] = pd.to_numeric(d["value"], errors="coerce")
    if d["value"].isna().any():
        raise ValueError("Invalid numeric values in 'value' column.")
    d["value"] = d["value"].astype(float)
    if d["value"].abs().eq(float("inf")).any():
        raise ValueError("Non-finite values in 'value' column.")

    d["date"] = _iso_dates(d["date"], "date", required=True)
    d["due_date"] = _iso_dates(d["due_date"], "due_date", required=False)

    for col in ("description", "category"):
        d[col] = d[col].fillna("").astype(str).str.strip()
    for col in ("payment_method", "observation"):
        d[col] = _optional_text(d[col])

    out = d[list(REQUIRED_COLUMNS + OPTIONAL_COLUMNS)].reset_index(drop=True)
    return out
