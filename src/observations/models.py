# file: src/observations/models.py
"""
Query, record and page shapes for the observations API.

The API returns ~160 fields per observation. Only `id` is modelled; the
rest travels untouched in `Record.payload` for the table-building step.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from src.observations.errors import RecordIntegrityError

MAX_PER_PAGE = 200


@dataclass(frozen=True)
class ObservationQuery:
    """Fixed filters for one collection session plus the `id_above` cursor."""
    iconic_taxa: Optional[str] = None
    place_id: Optional[int] = None
    term_id: Optional[int] = None
    term_value_id: Optional[int] = None
    d1: Optional[str] = None  # YYYY-MM-DD, observed on/after
    per_page: int = MAX_PER_PAGE
    order_by: str = "id"
    order: str = "asc"
    id_above: int = 0

    def __post_init__(self):
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ValueError(
                f"per_page must be between 1 and {MAX_PER_PAGE}, got {self.per_page}"
            )
        if self.order not in ("asc", "desc"):
            raise ValueError(f"order must be asc/desc, got {self.order}")
        if self.id_above < 0:
            raise ValueError(f"id_above must be >= 0, got {self.id_above}")

    def with_cursor(self, id_above: int) -> "ObservationQuery":
        return replace(self, id_above=id_above)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "iconic_taxa": self.iconic_taxa,
            "place_id": self.place_id,
            "term_id": self.term_id,
            "term_value_id": self.term_value_id,
            "d1": self.d1,
            "per_page": self.per_page,
            "order_by": self.order_by,
            "order": self.order,
            "id_above": self.id_above,
        }
        return {k: v for k, v in params.items() if v is not None and v != ""}


@dataclass(frozen=True)
class Record:
    id: int
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_json(cls, obj: Any) -> "Record":
        if not isinstance(obj, dict):
            raise RecordIntegrityError(f"Record is not an object. type={type(obj).__name__}")
        if "id" not in obj:
            raise RecordIntegrityError(
                f"Record missing 'id'. keys={sorted(obj.keys())[:25]}"
            )
        record_id = obj["id"]
        # bool is an int subclass; reject it explicitly
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            raise RecordIntegrityError(
                f"Record 'id' is not an integer. id={record_id!r} type={type(record_id).__name__}"
            )
        return cls(id=record_id, payload=obj)


@dataclass(frozen=True)
class Page:
    records: List[Record]
    id_above: int
    number: int

    def __len__(self) -> int:
        return len(self.records)

    @property
    def ids(self) -> List[int]:
        return [r.id for r in self.records]

    @property
    def max_id(self) -> Optional[int]:
        if not self.records:
            return None
        return max(self.ids)

    @property
    def min_id(self) -> Optional[int]:
        if not self.records:
            return None
        return min(self.ids)

    def is_short(self, page_size: int) -> bool:
        return len(self.records) < page_size
