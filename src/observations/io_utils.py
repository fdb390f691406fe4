# file: src/observations/io_utils.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

import pandas as pd


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _parquet_safe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Make object columns writable by pyarrow.

    Flattened API records still hold lists of objects (photos, identifications)
    and occasionally mixed scalar types; those cells are stored as JSON text.
    """
    out = df.copy()
    for col in out.columns:
        if out[col].dtype != object:
            continue
        non_null = out[col].dropna()
        kinds = {type(v) for v in non_null}
        if kinds & {list, dict}:
            out[col] = out[col].map(
                lambda v: json.dumps(v, default=str) if isinstance(v, (list, dict)) else v
            )
            kinds = {type(v) for v in out[col].dropna()}
        if len(kinds) > 1:
            out[col] = out[col].map(lambda v: None if pd.isna(v) else str(v))
    return out


def atomic_write_parquet(df: pd.DataFrame, path: Path) -> None:
    """
    Atomic parquet write: write to temp in same directory, then replace.
    """
    ensure_dir(path.parent)
    tmp = path.with_suffix(path.suffix + ".tmp")
    _parquet_safe(df).to_parquet(tmp, index=False)
    os.replace(tmp, path)


def atomic_write_json(payload: Dict[str, Any], path: Path) -> None:
    ensure_dir(path.parent)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)
    os.replace(tmp, path)
