# file: src/observations/collector.py
"""
Cursor pagination over the observations API.

Implementation pattern:
1. cursor = 0 (before the first id)
2. GET with per_page, order_by=id, order=asc, id_above=cursor
3. Append records
4. cursor = max(id) of the page just fetched
5. Stop when the page holds fewer than per_page records (empty included)

Requests are strictly sequential: page N's cursor is known before page
N+1 is requested. A fixed delay sits between requests.
"""

from __future__ import annotations

import logging
import time
from typing import Iterator, List, Optional, Protocol

from src.observations.errors import CollectorError, RecordIntegrityError
from src.observations.models import ObservationQuery, Page, Record

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_DELAY = 1.0


class PageFetcher(Protocol):
    def fetch_page(self, query: ObservationQuery, page_number: int = 1) -> Page:
        ...


def _check_page_order(page: Page, cursor: int) -> None:
    """Every id must be above the cursor and strictly increasing within the page."""
    if not page.records:
        return

    ids = page.ids
    if page.min_id <= cursor:
        raise RecordIntegrityError(
            f"Page {page.number} returned id {page.min_id} not above cursor {cursor}"
        )
    for prev, cur in zip(ids, ids[1:]):
        if cur <= prev:
            raise RecordIntegrityError(
                f"Page {page.number} ids not strictly ascending: {prev} followed by {cur}"
            )


def iter_pages(
    client: PageFetcher,
    query: ObservationQuery,
    *,
    request_delay: float = DEFAULT_REQUEST_DELAY,
    confirm_short_page: bool = False,
    max_pages: Optional[int] = None,
    diag: Optional[dict] = None,
) -> Iterator[Page]:
    """
    Yield pages in fetch order until the result set is complete.

    Args:
        client: anything with `fetch_page(query, page_number)`
        query: fixed filters; its `id_above` is the starting cursor
        request_delay: seconds to sleep before every fetch after the first
        confirm_short_page: when True a short non-empty page is followed by one
            more fetch and only an empty page ends collection
        max_pages: hard cap on fetches; exceeding it raises CollectorError
        diag: optional dict updated with pages/records/cursors as the loop runs
    """
    if query.order_by != "id" or query.order != "asc":
        raise ValueError(
            "Cursor pagination needs order_by='id' and order='asc', "
            f"got order_by={query.order_by!r} order={query.order!r}"
        )

    page_size = query.per_page
    cursor = query.id_above
    fetches = 0
    n_records = 0
    cursors: List[int] = []
    start_ts = time.monotonic()

    if diag is not None:
        diag.update({
            "query": query.to_params(),
            "pages": 0,
            "records": 0,
            "cursors": cursors,
            "final_cursor": cursor,
            "complete": False,
            "elapsed_seconds": 0.0,
        })

    while True:
        if max_pages is not None and fetches >= max_pages:
            raise CollectorError(
                f"Exceeded max_pages={max_pages} with {n_records} records collected "
                f"(cursor={cursor}); the server never returned a short page"
            )

        if fetches > 0 and request_delay > 0:
            time.sleep(request_delay)

        cursors.append(cursor)
        page = client.fetch_page(query.with_cursor(cursor), page_number=fetches + 1)
        fetches += 1
        _check_page_order(page, cursor)

        n_records += len(page)
        logger.info(
            "[collect][PAGE] page=%d id_above=%d returned=%d max_id=%s total=%d",
            page.number, cursor, len(page), page.max_id, n_records,
        )

        if page.records:
            cursor = page.max_id

        if diag is not None:
            diag.update({
                "pages": fetches,
                "records": n_records,
                "final_cursor": cursor,
                "elapsed_seconds": time.monotonic() - start_ts,
            })

        yield page

        if not page.records:
            break
        if page.is_short(page_size):
            if not confirm_short_page:
                break
            logger.info(
                "[collect][CONFIRM] short page (%d < %d); fetching once more to confirm end",
                len(page), page_size,
            )

    if diag is not None:
        diag["complete"] = True
    logger.info("[collect] done: %d records in %d pages", n_records, fetches)


def collect_observations(
    client: PageFetcher,
    query: ObservationQuery,
    *,
    request_delay: float = DEFAULT_REQUEST_DELAY,
    confirm_short_page: bool = False,
    max_pages: Optional[int] = None,
    diag: Optional[dict] = None,
) -> List[Record]:
    """
    Collect the full result set for `query`, in ascending id order.

    Any error aborts the run and nothing collected so far is returned; use
    `iter_pages` to persist pages incrementally instead.
    """
    records: List[Record] = []
    for page in iter_pages(
        client,
        query,
        request_delay=request_delay,
        confirm_short_page=confirm_short_page,
        max_pages=max_pages,
        diag=diag,
    ):
        records.extend(page.records)
    return records
