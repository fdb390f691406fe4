# file: src/observations/validate.py
"""Integrity gates for a collected result set."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationReport:
    ok: bool
    message: str
    details: dict


def validate_result_set(df: pd.DataFrame, *, id_col: str = "id") -> ValidationReport:
    """
    Check the invariants the cursor loop guarantees.

    - id column present, no null ids
    - no duplicate ids
    - ids strictly increasing in row (fetch) order
    """
    if id_col not in df.columns:
        return ValidationReport(
            ok=False,
            message=f"Missing id column '{id_col}'",
            details={"columns": list(df.columns)[:25]},
        )

    n_rows = int(len(df))
    if n_rows == 0:
        return ValidationReport(ok=True, message="OK (empty result set)", details={"n_rows": 0})

    ids = pd.to_numeric(df[id_col], errors="coerce")
    null_ids = int(ids.isna().sum())
    dup_mask = ids.duplicated(keep=False) & ids.notna()
    n_duplicates = int(ids[dup_mask].nunique())

    steps = np.diff(ids.dropna().to_numpy(dtype="float64"))
    out_of_order = int((steps <= 0).sum())

    details = {
        "n_rows": n_rows,
        "null_ids": null_ids,
        "duplicate_ids": n_duplicates,
        "out_of_order": out_of_order,
        "id_min": None if ids.dropna().empty else int(ids.min()),
        "id_max": None if ids.dropna().empty else int(ids.max()),
    }

    problems = []
    if null_ids:
        problems.append(f"{null_ids} null ids")
    if n_duplicates:
        sample = sorted(ids[dup_mask].dropna().astype("int64").unique().tolist())[:10]
        details["duplicate_sample"] = sample
        problems.append(f"{n_duplicates} duplicated ids")
    if out_of_order:
        problems.append(f"{out_of_order} ids not ascending")

    if problems:
        message = "Result set failed integrity checks: " + "; ".join(problems)
        logger.warning("[validate] %s", message)
        return ValidationReport(ok=False, message=message, details=details)

    return ValidationReport(ok=True, message="OK", details=details)
