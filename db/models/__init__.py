"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.cvj_stage import CVJStage
from db.models.kpi import KPI
from db.models.monthly_kpi_target import MonthlyKpiTarget
from db.models.sub_category import SubCategory
from db.models.week import Week
from db.models.weekly_data_entry import WeeklyDataEntry

__all__ = [
    "CVJStage",
    "SubCategory",
    "KPI",
    "Week",
    "WeeklyDataEntry",
    "MonthlyKpiTarget",
]
