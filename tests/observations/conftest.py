"""Shared fakes for the observation harvest tests."""

from __future__ import annotations

from typing import List, Sequence

import pytest

from src.observations.models import ObservationQuery, Page, Record


def make_observation(obs_id: int, observed_on: str = "2021-05-03") -> dict:
    return {
        "id": obs_id,
        "observed_on": observed_on,
        "observed_on_details": {"date": observed_on, "year": int(observed_on[:4])},
        "taxon": {"id": 47158, "name": "Insecta", "rank": "class"},
        "place_guess": "Somewhere",
        "photos": [{"id": obs_id * 10, "url": f"https://example.org/{obs_id}.jpg"}],
    }


class DatasetAPI:
    """
    In-memory server honoring id_above/per_page like the real endpoint.

    Returns the next `per_page` ids strictly above the cursor.
    """

    def __init__(self, ids: Sequence[int]):
        self.ids = sorted(ids)
        self.calls: List[ObservationQuery] = []

    def fetch_page(self, query: ObservationQuery, page_number: int = 1) -> Page:
        self.calls.append(query)
        assert len(self.calls) < 10_000, "collector did not terminate"
        selected = [i for i in self.ids if i > query.id_above][: query.per_page]
        records = [Record.from_json(make_observation(i)) for i in selected]
        return Page(records=records, id_above=query.id_above, number=page_number)


class ScriptedAPI:
    """Returns pre-built pages in order; asking for more is a test failure."""

    def __init__(self, pages: Sequence[Sequence[int]]):
        self.pages = [list(p) for p in pages]
        self.calls: List[ObservationQuery] = []

    def fetch_page(self, query: ObservationQuery, page_number: int = 1) -> Page:
        self.calls.append(query)
        if len(self.calls) > len(self.pages):
            raise AssertionError(f"unexpected fetch #{len(self.calls)}")
        ids = self.pages[len(self.calls) - 1]
        records = [Record.from_json(make_observation(i)) for i in ids]
        return Page(records=records, id_above=query.id_above, number=page_number)


def spaced_ids(n: int, start: int = 1000, step: int = 3) -> List[int]:
    return [start + step * i for i in range(n)]


@pytest.fixture
def query() -> ObservationQuery:
    return ObservationQuery(
        iconic_taxa="Insecta",
        place_id=1,
        term_id=1,
        term_value_id=2,
        d1="2020-01-01",
        per_page=200,
    )
