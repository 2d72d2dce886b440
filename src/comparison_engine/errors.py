"""Exceptions raised by the comparison engine."""

from typing import Optional


class ComparisonError(Exception):
    """Base class for comparison engine errors."""


class InvalidInputError(ComparisonError, ValueError):
    """Raised when a comparison request cannot be attempted.

    Covers technology sets outside the supported size range, duplicate
    technologies in one request, and criteria/metrics combinations that
    cannot produce a meaningful score.
    """


class NotFoundError(ComparisonError, LookupError):
    """Raised when a requested technology does not exist.

    The whole comparison is aborted; partial results are never returned.
    """

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class CatalogLoadError(ComparisonError):
    """Raised when a technology catalog file cannot be read or validated."""
