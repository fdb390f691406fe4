# file: src/observations/config.py
"""
Harvest configuration.

Query filters, transport settings and output paths live on one frozen
dataclass so every run logs the same config. Overrides come from the
environment (or a local .env) via `load_config()`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from src.observations.models import MAX_PER_PAGE, ObservationQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HarvestConfig:
    # Query filters
    iconic_taxa: Optional[str] = "Insecta"
    place_id: Optional[int] = 1
    term_id: Optional[int] = 1         # annotation: Life Stage
    term_value_id: Optional[int] = 2   # annotation value: Adult
    d1: Optional[str] = "2020-01-01"
    per_page: int = MAX_PER_PAGE

    # Transport
    base_url: str = "https://api.inaturalist.org/v1/observations"
    user_agent: str = "obs-harvest/0.1"
    timeout: int = 30
    request_delay: float = 1.0         # seconds between page requests
    max_retries: int = 3
    backoff_factor: float = 1.0
    retry_statuses: Tuple[int, ...] = (429, 500, 502, 503, 504)

    # Pagination policy
    confirm_short_page: bool = False
    max_pages: Optional[int] = None

    # IO
    data_dir: str = "data"
    dataset_name: str = "observations"
    overwrite: bool = False

    def query(self) -> ObservationQuery:
        return ObservationQuery(
            iconic_taxa=self.iconic_taxa,
            place_id=self.place_id,
            term_id=self.term_id,
            term_value_id=self.term_value_id,
            d1=self.d1,
            per_page=self.per_page,
        )

    def run_id(self) -> str:
        return datetime.utcnow().strftime("%Y%m%d_%H%M%S")

    def data_path(self) -> Path:
        return Path(self.data_dir) / self.dataset_name

    def raw_path(self) -> Path:
        return self.data_path() / "raw_observations.parquet"

    def clean_path(self) -> Path:
        return self.data_path() / "observations.parquet"

    def metadata_path(self) -> Path:
        return self.data_path() / "metadata.json"


def _env_optional_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    if raw.lower() in ("", "none", "null"):
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("[config] invalid %s=%r, using default %r", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        logger.warning("[config] invalid %s=%r, using default %r", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError:
        logger.warning("[config] invalid %s=%r, using default %r", name, raw, default)
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config(**overrides) -> HarvestConfig:
    """
    Build a HarvestConfig from defaults, OBS_* env vars and explicit overrides.

    Explicit keyword overrides win over the environment.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)

    base = HarvestConfig()
    values = {
        "iconic_taxa": os.getenv("OBS_ICONIC_TAXA", base.iconic_taxa),
        "place_id": _env_optional_int("OBS_PLACE_ID", base.place_id),
        "term_id": _env_optional_int("OBS_TERM_ID", base.term_id),
        "term_value_id": _env_optional_int("OBS_TERM_VALUE_ID", base.term_value_id),
        "d1": os.getenv("OBS_D1", base.d1),
        "per_page": _env_int("OBS_PER_PAGE", base.per_page),
        "base_url": os.getenv("OBS_BASE_URL", base.base_url),
        "timeout": _env_int("OBS_TIMEOUT", base.timeout),
        "request_delay": _env_float("OBS_REQUEST_DELAY", base.request_delay),
        "max_retries": _env_int("OBS_MAX_RETRIES", base.max_retries),
        "backoff_factor": _env_float("OBS_BACKOFF_FACTOR", base.backoff_factor),
        "confirm_short_page": _env_bool("OBS_CONFIRM_SHORT_PAGE", base.confirm_short_page),
        "max_pages": _env_optional_int("OBS_MAX_PAGES", base.max_pages),
        "data_dir": os.getenv("OBS_DATA_DIR", base.data_dir),
        "dataset_name": os.getenv("OBS_DATASET_NAME", base.dataset_name),
        "overwrite": _env_bool("OBS_OVERWRITE", base.overwrite),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return HarvestConfig(**values)
