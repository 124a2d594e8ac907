"""
app/api/routers/admin_router.py

Single-call snapshot of the configuration data the admin console edits.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from app.schemas.base import CamelModel
from app.schemas.hierarchy import CVJStageTreeResponse, KPIResponse
from app.schemas.monthly_targets import MonthlyTargetResponse
from app.schemas.weeks import WeekResponse
from db.repositories.hierarchy_repository import HierarchyRepository
from db.repositories.monthly_target_repository import MonthlyTargetRepository
from db.repositories.week_repository import WeekRepository
from db.session import get_db

router = APIRouter(prefix="/api/admin", tags=["admin"])


class AdminDataResponse(CamelModel):
    cvj_stages: list[CVJStageTreeResponse]
    weeks: list[WeekResponse]
    monthly_targets: list[MonthlyTargetResponse]
    all_kpis: list[KPIResponse] = Field(default_factory=list)


@router.get("/data", response_model=AdminDataResponse)
def get_admin_data(db: Session = Depends(get_db)) -> AdminDataResponse:
    """
    Active stages with nested sub-categories and KPIs, plus every week,
    monthly target and KPI.
    """
    hierarchy = HierarchyRepository(db)
    return AdminDataResponse(
        cvj_stages=[
            CVJStageTreeResponse.model_validate(s)
            for s in hierarchy.list_stages_with_hierarchy()
        ],
        weeks=[WeekResponse.model_validate(w) for w in WeekRepository(db).list_weeks()],
        monthly_targets=[
            MonthlyTargetResponse.model_validate(t)
            for t in MonthlyTargetRepository(db).list_targets()
        ],
        all_kpis=[KPIResponse.model_validate(k) for k in hierarchy.list_kpis()],
    )
