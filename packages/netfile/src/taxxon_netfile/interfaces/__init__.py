"""Filing-partner interfaces.

Available Interfaces:
    NetfileProvider: Protocol every NETFILE partner implementation satisfies
    SubmissionStore: Protocol for injected submission storage

Wire Types:
    SubmissionRequest: Flattened filing sent to the partner
    SubmissionResponse: Outcome of a submission
    StatusResponse: Outcome of a status check
    ValidationOutcome: Outcome of a validate-only call
"""

from taxxon_netfile.interfaces.base import NetfileProvider, SubmissionStore
from taxxon_netfile.interfaces.types import (
    StatusResponse,
    StoredSubmission,
    SubmissionCalculated,
    SubmissionCredits,
    SubmissionDeductions,
    SubmissionErrorDetail,
    SubmissionIncome,
    SubmissionPersonalInfo,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionStatus,
    ValidationOutcome,
)

__all__ = [
    # Protocols
    "NetfileProvider",
    "SubmissionStore",
    # Enums
    "SubmissionStatus",
    # Request
    "SubmissionPersonalInfo",
    "SubmissionIncome",
    "SubmissionDeductions",
    "SubmissionCredits",
    "SubmissionCalculated",
    "SubmissionRequest",
    # Responses
    "SubmissionErrorDetail",
    "SubmissionResponse",
    "StatusResponse",
    "ValidationOutcome",
    "StoredSubmission",
]
