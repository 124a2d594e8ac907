"""
app/schemas package marker.
"""

from app.schemas.analytics import (
    DashboardResponse,
    HealthScoreResponse,
    MonthlyOverviewResponse,
    PeriodAnalysisResponse,
    ProcessedKpiMonthlyDataResponse,
)
from app.schemas.base import CamelModel
from app.schemas.hierarchy import CVJStageResponse, KPIResponse, SubCategoryResponse
from app.schemas.monthly_targets import MonthlyTargetResponse
from app.schemas.weekly_data import BulkWriteResponse, WeeklyDataResponse
from app.schemas.weeks import WeekResponse

__all__ = [
    "BulkWriteResponse",
    "CamelModel",
    "CVJStageResponse",
    "DashboardResponse",
    "HealthScoreResponse",
    "KPIResponse",
    "MonthlyOverviewResponse",
    "MonthlyTargetResponse",
    "PeriodAnalysisResponse",
    "ProcessedKpiMonthlyDataResponse",
    "SubCategoryResponse",
    "WeekResponse",
    "WeeklyDataResponse",
]
