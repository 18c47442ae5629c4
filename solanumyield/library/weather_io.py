"""Read daily weather tables into :class:`WeatherSeries`."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import pandas as pd

from solanumyield.core.data_containers import WeatherSeries, to_date
from solanumyield.core.exceptions import DataError

# Lower-cased source column -> model column. Covers the usual names in
# downloaded daily weather (e.g. NASA POWER exports).
DEFAULT_COLUMNS: Mapping[str, str] = {
    "date": "date",
    "fecha": "date",
    "tmax": "tmax",
    "t2m_max": "tmax",
    "tmin": "tmin",
    "t2m_min": "tmin",
    "srad": "srad",
    "rad": "srad",
    "allsky_sfc_sw_dwn": "srad",
}


def weather_from_dataframe(
    df: pd.DataFrame,
    start=None,
    end=None,
    columns: Mapping[str, str] | None = None,
) -> WeatherSeries:
    """
    Rename, sort, and clip a daily weather frame, then build a series.

    Parameters
    ----------
    df : pandas.DataFrame
        Daily weather. Column names are matched case-insensitively.
    start, end : date-like, optional
        Inclusive bounds of the rows to keep.
    columns : mapping, optional
        Source → model column names (``date, tmax, tmin, srad``); defaults to
        :data:`DEFAULT_COLUMNS`.

    Raises
    ------
    DataError
        If a required column is missing or given twice, or the rows fail the
        :class:`WeatherSeries` checks (duplicates, non-finite values).
    """
    mapping = {k.lower(): v for k, v in (columns or DEFAULT_COLUMNS).items()}
    df = df.rename(columns=lambda c: str(c).strip().lower())
    renamed = df.rename(columns=mapping)
    cols = ["date", "tmax", "tmin", "srad"]
    clash = set(renamed.columns[renamed.columns.duplicated()]) & set(cols)
    if clash:
        sources = [
            c for c, r in zip(df.columns, renamed.columns) if r in clash
        ]
        raise DataError(
            f"Weather table has several columns for {sorted(clash)}: {sources}"
        )
    df = renamed
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise DataError(f"Weather table lacks columns: {missing}")

    df = df.loc[:, cols].copy()
    df["date"] = pd.to_datetime(df["date"])
    if start is not None:
        df = df.loc[df["date"] >= pd.Timestamp(to_date(start))]
    if end is not None:
        df = df.loc[df["date"] <= pd.Timestamp(to_date(end))]
    df = df.sort_values("date", kind="stable")
    return WeatherSeries.from_dataframe(df)


def load_weather_csv(
    path: Path | str,
    start=None,
    end=None,
    columns: Mapping[str, str] | None = None,
) -> WeatherSeries:
    """Read a CSV of daily weather; see :func:`weather_from_dataframe`."""
    return weather_from_dataframe(
        pd.read_csv(path), start=start, end=end, columns=columns
    )
