"""
app/api/routers package marker.
"""

from app.api.routers.admin_router import router as admin_router
from app.api.routers.analytics_router import router as analytics_router
from app.api.routers.cvj_stage_router import router as cvj_stage_router
from app.api.routers.export_router import router as export_router
from app.api.routers.kpi_router import router as kpi_router
from app.api.routers.monthly_target_router import router as monthly_target_router
from app.api.routers.sub_category_router import router as sub_category_router
from app.api.routers.week_router import router as week_router
from app.api.routers.weekly_data_router import router as weekly_data_router

__all__ = [
    "admin_router",
    "analytics_router",
    "cvj_stage_router",
    "export_router",
    "kpi_router",
    "monthly_target_router",
    "sub_category_router",
    "week_router",
    "weekly_data_router",
]

ALL_ROUTERS = (
    cvj_stage_router,
    sub_category_router,
    kpi_router,
    week_router,
    weekly_data_router,
    monthly_target_router,
    analytics_router,
    export_router,
    admin_router,
)
