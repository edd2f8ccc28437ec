"""Utility modules."""

from smartsearch.utils.exceptions import (
    NotFoundError,
    SmartSearchException,
    ValidationError,
)

__all__ = [
    "NotFoundError",
    "SmartSearchException",
    "ValidationError",
]
