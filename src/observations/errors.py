# file: src/observations/errors.py
"""Exceptions raised while collecting observations.

Each error also subclasses the builtin a caller would naturally catch, so
`except ValueError` around a collection run keeps working.
"""

from __future__ import annotations

from typing import Optional


class CollectorError(Exception):
    """Base class for every collection failure. Always fatal for the run."""


class FetchError(CollectorError, RuntimeError):
    """Transport failure or non-success HTTP status for one page request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ResponseFormatError(CollectorError, ValueError):
    """Response body is not JSON or lacks a `results` array."""


class RecordIntegrityError(CollectorError, ValueError):
    """A record cannot be used to advance the cursor (missing/invalid id, id not above cursor)."""
