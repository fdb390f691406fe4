# file: src/observations/tasks.py
"""
Idempotent pipeline tasks.

- deterministic for a given config (same query -> same raw pull)
- atomic on write
- safe to rerun (overwrite flag controls)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import pandas as pd

from src.observations.client import ObservationsClient
from src.observations.collector import PageFetcher, collect_observations
from src.observations.config import HarvestConfig
from src.observations.io_utils import atomic_write_json, atomic_write_parquet, ensure_dir
from src.observations.prepare import prepare_observations, records_to_frame
from src.observations.validate import validate_result_set

logger = logging.getLogger(__name__)


def ingest_observations(
    config: HarvestConfig,
    client: Optional[PageFetcher] = None,
    diag: Optional[dict] = None,
) -> str:
    """
    Task 1: Collect the full result set and save raw_observations.parquet
    """
    raw_path = config.raw_path()
    ensure_dir(raw_path.parent)

    if raw_path.exists() and not config.overwrite:
        logger.info("[ingest] raw exists, skipping: %s", raw_path)
        return str(raw_path)

    client = client or ObservationsClient.from_config(config)
    query = config.query()
    logger.info("[ingest] query=%s", query.to_params())

    records = collect_observations(
        client,
        query,
        request_delay=config.request_delay,
        confirm_short_page=config.confirm_short_page,
        max_pages=config.max_pages,
        diag=diag,
    )

    df_raw = records_to_frame(records)
    atomic_write_parquet(df_raw, raw_path)
    logger.info("[ingest] wrote raw: %s (%d rows)", raw_path, len(df_raw))
    return str(raw_path)


def prepare_clean(raw_path: str, config: HarvestConfig) -> str:
    """
    Task 2: Validate, derive date fields, save observations.parquet + metadata.json
    """
    clean_path = config.clean_path()
    ensure_dir(clean_path.parent)

    if clean_path.exists() and not config.overwrite:
        logger.info("[prepare] clean exists, skipping: %s", clean_path)
        return str(clean_path)

    df_raw = pd.read_parquet(raw_path)

    report = validate_result_set(df_raw)
    if not report.ok:
        raise ValueError(f"[prepare] {report.message} details={report.details}")

    df_clean = prepare_observations(df_raw)

    metadata = {
        "pull_timestamp": datetime.now(timezone.utc).isoformat(),
        "query": config.query().to_params(),
        "raw_rows": int(len(df_raw)),
        "clean_rows": int(len(df_clean)),
        "missing_dates": int(df_clean["observed_date"].isna().sum()),
        "id_min": report.details.get("id_min"),
        "id_max": report.details.get("id_max"),
    }

    atomic_write_parquet(df_clean, clean_path)
    atomic_write_json(metadata, config.metadata_path())

    logger.info("[prepare] wrote clean: %s (%d rows)", clean_path, len(df_clean))
    return str(clean_path)


def run_full_pipeline(
    config: HarvestConfig,
    client: Optional[PageFetcher] = None,
) -> Dict:
    """ingest -> prepare; returns a summary for display."""
    run_id = config.run_id()
    diag: dict = {}

    raw_path = ingest_observations(config, client=client, diag=diag)
    clean_path = prepare_clean(raw_path, config)

    df_clean = pd.read_parquet(clean_path)
    years = df_clean["year"].dropna()

    return {
        "run_id": run_id,
        "raw_path": raw_path,
        "clean_path": clean_path,
        "metadata_path": str(config.metadata_path()),
        # diag stays empty when ingest was skipped
        "pages_fetched": diag.get("pages", 0),
        "records": int(len(df_clean)),
        "year_range": f"{int(years.min())}-{int(years.max())}" if not years.empty else "n/a",
    }
