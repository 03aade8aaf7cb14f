"""Maritime Tracking - import process tracking built on Asana tasks"""

from __future__ import annotations

__version__ = "1.0.0"

# Lazy imports for the tracking module
def __getattr__(name: str):
    """
    Lazy imports so lightweight modules (title parser, field mapper) load
    without the HTTP and database stack.
    """
    if name in ("TrackingRecord", "MaritimeStage"):
        from maritime_tracking.tracking import models
        if name == "TrackingRecord":
            return models.TrackingRecord
        return models.MaritimeStage

    if name == "TrackingService":
        from maritime_tracking.tracking.service import TrackingService
        return TrackingService

    if name == "AsanaClient":
        from maritime_tracking.asana.client import AsanaClient
        return AsanaClient

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AsanaClient",
    "MaritimeStage",
    "TrackingRecord",
    "TrackingService",
]
