# file: src/observations/prepare.py
"""
Turn the collected result set into one analysis table.

Steps:
1. Flatten nested JSON into dot-path columns (`taxon.name`,
   `observed_on_details.year`, ...)
2. Parse the observation date
3. Derive calendar fields used for grouping (year, month, ISO week, weekday)
"""

from __future__ import annotations

import logging
from typing import Iterable, List

import pandas as pd

from src.observations.models import Record

logger = logging.getLogger(__name__)

DATE_FIELDS: List[str] = [
    "observed_date",
    "year",
    "month",
    "month_name",
    "week",
    "day_of_year",
    "weekday",
    "weekday_name",
]


def records_to_frame(records: Iterable[Record]) -> pd.DataFrame:
    """
    Flatten record payloads into a DataFrame, one row per record.

    Nested objects become dot-separated columns; lists stay as cells.
    """
    payloads = [r.payload for r in records]
    if not payloads:
        return pd.DataFrame(columns=["id"])

    df = pd.json_normalize(payloads, sep=".")
    logger.info("[prepare] flattened %d records into %d columns", len(df), len(df.columns))
    return df


def _parse_observed(df: pd.DataFrame, date_col: str, fallback_col: str) -> pd.Series:
    if date_col in df.columns:
        observed = pd.to_datetime(df[date_col], errors="coerce", format="ISO8601")
        if getattr(observed.dt, "tz", None) is not None:
            observed = observed.dt.tz_convert("UTC").dt.tz_localize(None)
    else:
        observed = pd.Series(pd.NaT, index=df.index, dtype="datetime64[ns]")

    if fallback_col in df.columns:
        fallback = (
            pd.to_datetime(df[fallback_col], errors="coerce", utc=True, format="ISO8601")
            .dt.tz_localize(None)
        )
        observed = observed.fillna(fallback)

    return observed.dt.normalize()


def add_date_fields(
    df: pd.DataFrame,
    date_col: str = "observed_on",
    fallback_col: str = "time_observed_at",
) -> pd.DataFrame:
    """
    Add calendar columns derived from the observation date.

    Unparseable or missing dates give NaT/<NA> in every derived column
    rather than failing; check `observed_date.isna()` downstream.

    Args:
        df: flattened observations (not modified)
        date_col: primary date column, `YYYY-MM-DD`
        fallback_col: timestamp used when `date_col` is missing/blank

    Returns:
        Copy of df with DATE_FIELDS appended
    """
    out = df.copy()
    observed = _parse_observed(out, date_col, fallback_col)

    out["observed_date"] = observed
    out["year"] = observed.dt.year.astype("Int64")
    out["month"] = observed.dt.month.astype("Int64")
    out["month_name"] = observed.dt.month_name()
    out["week"] = observed.dt.isocalendar().week.astype("Int64")
    out["day_of_year"] = observed.dt.dayofyear.astype("Int64")
    out["weekday"] = observed.dt.dayofweek.astype("Int64")  # Monday=0
    out["weekday_name"] = observed.dt.day_name()

    n_missing = int(observed.isna().sum())
    if n_missing:
        logger.warning("[prepare] %d/%d rows without a usable observation date", n_missing, len(out))

    return out


def prepare_observations(df_raw: pd.DataFrame) -> pd.DataFrame:
    """Flattened result set -> analysis table sorted by id."""
    df = add_date_fields(df_raw)
    if "id" in df.columns and not df.empty:
        df = df.sort_values("id").reset_index(drop=True)
    return df
