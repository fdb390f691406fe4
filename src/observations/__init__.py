"""
Observation harvest: cursor-paginated collection + analysis table.

Modules:
- config: query filters, transport and IO settings
- models: ObservationQuery, Record, Page
- client: one GET -> one Page
- collector: id_above cursor loop until a short page
- prepare: flatten JSON and derive date fields
- validate: result-set integrity gates
- tasks: idempotent ingest/prepare tasks
- cli: Typer entry point
"""

from .client import ObservationsClient
from .collector import collect_observations, iter_pages
from .config import HarvestConfig, load_config
from .errors import CollectorError, FetchError, RecordIntegrityError, ResponseFormatError
from .models import ObservationQuery, Page, Record
from .prepare import add_date_fields, prepare_observations, records_to_frame
from .validate import ValidationReport, validate_result_set

__all__ = [
    "ObservationsClient",
    "collect_observations",
    "iter_pages",
    "HarvestConfig",
    "load_config",
    "CollectorError",
    "FetchError",
    "RecordIntegrityError",
    "ResponseFormatError",
    "ObservationQuery",
    "Page",
    "Record",
    "add_date_fields",
    "prepare_observations",
    "records_to_frame",
    "ValidationReport",
    "validate_result_set",
]
