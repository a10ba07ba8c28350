"""
Domain error taxonomy.

- DataIntegrityError: a field needed for bucketing or ordering is missing or
  unparseable. Always propagated; aggregation never returns partial results.

Password policy failures are not errors; they are returned as messages.
"""

from __future__ import annotations


class DataIntegrityError(ValueError):
    """Raised when a sale record cannot be trusted for aggregation."""
    pass


__all__ = ["DataIntegrityError"]
