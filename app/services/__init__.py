"""
app/services package marker.
"""

from app.services.export_service import (
    ExportResult,
    ScorecardExportService,
    get_export_service,
)
from app.services.scorecard_service import ScorecardService

__all__ = [
    "ExportResult",
    "ScorecardExportService",
    "get_export_service",
    "ScorecardService",
]
