"""
app/api/dependencies.py

Shared FastAPI dependencies and error mapping for the scorecard routers.
"""

from __future__ import annotations

import logging
import uuid
from typing import NoReturn

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.services.scorecard_service import ScorecardService
from db.repositories.errors import (
    BulkUpsertError,
    DuplicateEntityError,
    EntityNotFoundError,
    ScorecardRepositoryError,
)
from db.session import get_db

logger = logging.getLogger(__name__)


def get_scorecard_service(db: Session = Depends(get_db)) -> ScorecardService:
    return ScorecardService(db)


def raise_for_repository_error(exc: ScorecardRepositoryError) -> NoReturn:
    """
    Translate a repository exception into the matching HTTP error.

    404 for missing rows, 409 for uniqueness conflicts, 500 otherwise.
    """

    if isinstance(exc, EntityNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, DuplicateEntityError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, BulkUpsertError):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{exc} No changes were saved.",
        ) from exc
    logger.error("Unhandled repository error: %s", exc)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Repository operation failed; see server logs for details.",
    ) from exc


def parse_uuid_list(raw: str | None, parameter: str) -> list[uuid.UUID] | None:
    """
    Parse a comma-separated list of UUIDs from a query parameter.

    Raises HTTP 422 naming the offending value.
    """

    if raw is None or not raw.strip():
        return None
    ids: list[uuid.UUID] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(uuid.UUID(part))
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid id {part!r} in {parameter}.",
            ) from exc
    return ids or None


def kpi_ids_query(
    kpi_ids: str | None = Query(default=None, description="Comma-separated KPI ids."),
) -> list[uuid.UUID] | None:
    return parse_uuid_list(kpi_ids, "kpi_ids")


def stage_ids_query(
    stage_ids: str | None = Query(default=None, description="Comma-separated CVJ stage ids."),
) -> list[uuid.UUID] | None:
    return parse_uuid_list(stage_ids, "stage_ids")
