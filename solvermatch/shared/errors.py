"""
Error taxonomy for snapshot generation, retrieval and decoding.

Only ``ValidationError`` is fatal for a hand. Every other error is scoped to
a single snapshot: the pipeline logs it and degrades that snapshot to
"no match" or "no solver data".
"""

from __future__ import annotations


class SolverMatchError(Exception):
    """Base class for all solvermatch errors."""


class ValidationError(SolverMatchError, ValueError):
    """Malformed input: missing hero seat, bad action data, unparsable cards or ranges."""


class MatchNotFound(SolverMatchError):
    """No indexed node cleared the similarity threshold."""


class SearchError(SolverMatchError):
    """The vector index could not be queried (transport or protocol failure)."""


class StorageError(SolverMatchError):
    """A blob or byte range could not be read from object storage."""


class DecodeError(SolverMatchError):
    """A fetched blob could not be decompressed or decoded into solver nodes."""


class ExternalTimeout(SolverMatchError, TimeoutError):
    """A search or fetch call exceeded its time bound."""
