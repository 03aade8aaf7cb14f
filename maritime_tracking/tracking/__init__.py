"""
Tracking module - operational import processes derived from Asana tasks.
"""

from maritime_tracking.tracking.metrics import (
    calculate_kpis,
    calculate_metrics,
    filter_trackings,
    is_operation_cancelled,
)
from maritime_tracking.tracking.models import MaritimeStage, TrackingRecord
from maritime_tracking.tracking.title_parser import (
    TitleParts,
    extract_company_strict,
    parse_title,
)
from maritime_tracking.tracking.transform import build_trackings, transform_task

__all__ = [
    # Models
    "MaritimeStage",
    "TrackingRecord",
    "TitleParts",
    # Parsing / transform
    "build_trackings",
    "extract_company_strict",
    "parse_title",
    "transform_task",
    # Aggregates
    "calculate_kpis",
    "calculate_metrics",
    "filter_trackings",
    "is_operation_cancelled",
]
