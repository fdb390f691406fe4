# file: src/observations/client.py
"""
Single-page fetch against the observations API.

One call == one GET. Transient transport errors are retried inside the
session adapter (bounded, exponential backoff); anything left after that
is surfaced as a FetchError and ends the collection run.
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.observations.config import HarvestConfig
from src.observations.errors import FetchError, ResponseFormatError
from src.observations.models import ObservationQuery, Page, Record

logger = logging.getLogger(__name__)

_SECRET_PARAMS = {"api_key", "access_token", "token"}


def _sanitize_url(url: str) -> str:
    parts = urlsplit(url)
    q = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k.lower() not in _SECRET_PARAMS
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(q), parts.fragment))


class ObservationsClient:
    BASE_URL = "https://api.inaturalist.org/v1/observations"

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: int = 30,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        retry_statuses: Optional[Tuple[int, ...]] = None,
        user_agent: str = "obs-harvest/0.1",
        debug_requests: bool = False,
    ):
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.retry_statuses = retry_statuses or (429, 500, 502, 503, 504)
        self.debug_requests = debug_requests
        self.session = self._create_session()
        self.session.headers["User-Agent"] = user_agent
        self.session.headers["Accept"] = "application/json"

    @classmethod
    def from_config(cls, config: HarvestConfig) -> "ObservationsClient":
        return cls(
            config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            backoff_factor=config.backoff_factor,
            retry_statuses=config.retry_statuses,
            user_agent=config.user_agent,
        )

    def _create_session(self) -> requests.Session:
        """Create requests Session with retry logic for transient errors."""
        session = requests.Session()
        retries = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,  # 1s, 2s, 4s between retries
            status_forcelist=self.retry_statuses,
            allowed_methods=frozenset(["GET"]),
            connect=self.max_retries,
            read=self.max_retries,
            raise_on_status=False,  # final bad status is handled by fetch_page
        )
        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    @staticmethod
    def _extract_results(payload: Any, *, request_url: Optional[str] = None) -> List[dict]:
        if not isinstance(payload, dict):
            raise ResponseFormatError(
                f"Payload is not a JSON object. type={type(payload).__name__} url={request_url}"
            )

        if "results" not in payload:
            raise ResponseFormatError(
                f"Payload missing 'results'. url={request_url} keys={list(payload.keys())[:25]}"
            )

        results = payload["results"]
        if not isinstance(results, list):
            raise ResponseFormatError(
                f"Payload 'results' is not a list. type={type(results).__name__} url={request_url}"
            )
        return results

    def fetch_page(self, query: ObservationQuery, page_number: int = 1) -> Page:
        """
        Fetch the records whose id is strictly greater than `query.id_above`.

        Raises:
            FetchError: transport failure or non-2xx status (after retries)
            ResponseFormatError: body is not JSON / has no `results` list
            RecordIntegrityError: a record has no usable integer `id`
        """
        params = query.to_params()
        start_ts = time.monotonic()
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            elapsed = time.monotonic() - start_ts
            logger.warning(
                "[fetch][REQUEST_FAIL] page=%d id_above=%s elapsed=%.2fs error=%s",
                page_number, query.id_above, elapsed, e,
            )
            raise FetchError(
                f"Request failed for page {page_number} (id_above={query.id_above}): {e}",
                url=self.base_url,
            ) from e

        elapsed = time.monotonic() - start_ts
        safe_url = _sanitize_url(resp.url) if isinstance(resp.url, str) else self.base_url

        if not 200 <= resp.status_code < 300:
            logger.warning(
                "[fetch][HTTP_ERROR] page=%d status=%s elapsed=%.2fs url=%s",
                page_number, resp.status_code, elapsed, safe_url,
            )
            raise FetchError(
                f"HTTP {resp.status_code} for page {page_number} url={safe_url}",
                status_code=resp.status_code,
                url=safe_url,
            )

        if self.debug_requests:
            logger.info(
                "[fetch][REQUEST_OK] page=%d status=%s elapsed=%.2fs url=%s",
                page_number, resp.status_code, elapsed, safe_url,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise ResponseFormatError(f"Response is not valid JSON. url={safe_url}") from e

        results = self._extract_results(payload, request_url=safe_url)
        records = [Record.from_json(obj) for obj in results]
        return Page(records=records, id_above=query.id_above, number=page_number)
