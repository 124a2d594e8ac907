"""
Repository layer exports.
"""

from db.repositories.errors import (
    BulkUpsertError,
    DuplicateEntityError,
    EntityNotFoundError,
    ScorecardRepositoryError,
)
from db.repositories.hierarchy_repository import HierarchyRepository
from db.repositories.monthly_target_repository import MonthlyTargetRepository
from db.repositories.types import MonthlyTargetUpsert, WeeklyEntryUpsert
from db.repositories.week_repository import WeekRepository
from db.repositories.weekly_data_repository import WeeklyDataRepository

__all__ = [
    "HierarchyRepository",
    "WeekRepository",
    "WeeklyDataRepository",
    "MonthlyTargetRepository",
    "WeeklyEntryUpsert",
    "MonthlyTargetUpsert",
    "ScorecardRepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "BulkUpsertError",
]
