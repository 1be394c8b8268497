from tradein.tracking.client import TrackingClient, number_from_query, validate_timeline
from tradein.tracking.models import (
    GradingResults,
    SubmissionItem,
    TimelineStep,
    TrackedSubmission,
    TrackingResult,
)

__all__ = [
    "GradingResults",
    "SubmissionItem",
    "TimelineStep",
    "TrackedSubmission",
    "TrackingClient",
    "TrackingResult",
    "number_from_query",
    "validate_timeline",
]
