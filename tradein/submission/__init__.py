from tradein.submission.validation import SubmissionForm, validate_form
from tradein.submission.workflow import (
    CreatedSubmission,
    SubmissionOutcome,
    SubmissionState,
    SubmissionSummary,
    SubmissionWorkflow,
)

__all__ = [
    "CreatedSubmission",
    "SubmissionForm",
    "SubmissionOutcome",
    "SubmissionState",
    "SubmissionSummary",
    "SubmissionWorkflow",
    "validate_form",
]
