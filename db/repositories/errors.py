"""
Repository-layer exceptions for scorecard persistence.
"""

from __future__ import annotations

from collections.abc import Iterable


class ScorecardRepositoryError(Exception):
    """Base exception for scorecard repository failures."""


class EntityNotFoundError(ScorecardRepositoryError):
    """Raised when one or more referenced rows do not exist."""

    def __init__(self, entity: str, ids: Iterable[object]) -> None:
        self.entity = entity
        self.ids = [str(i) for i in ids]
        if len(self.ids) == 1:
            message = f"{entity} not found: {self.ids[0]}"
        else:
            message = f"{entity}s not found: {', '.join(self.ids)}"
        super().__init__(message)


class DuplicateEntityError(ScorecardRepositoryError):
    """Raised when a write would violate a uniqueness rule."""


class BulkUpsertError(ScorecardRepositoryError):
    """Raised when a bulk upsert fails; no row of the batch was written."""
