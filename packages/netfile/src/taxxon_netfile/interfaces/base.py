"""Filing-partner and submission-store contracts.

These interfaces use Python's structural subtyping via typing.Protocol: any
class with matching methods is a compatible provider or store, no explicit
inheritance required.

Design Goals:
- One implementation per partner: each NETFILE partner gets its own
  provider class; the caller picks one through configuration
- Injected state: providers never keep process-wide submission state; they
  are handed a SubmissionStore owned by the caller
- Async-first: provider methods are async since real partners are remote

Example Usage:
    ```python
    from taxxon_netfile.interfaces.base import NetfileProvider

    class AcmePartnerProvider:
        name = "Acme Partner"

        async def validate_filing(self, request):
            ...

        async def submit_filing(self, request):
            ...

        async def check_status(self, confirmation_number):
            ...

    # AcmePartnerProvider is compatible with NetfileProvider
    ```
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from taxxon_netfile.interfaces.types import (
    StatusResponse,
    StoredSubmission,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionStatus,
    ValidationOutcome,
)


@runtime_checkable
class NetfileProvider(Protocol):
    """Protocol for a NETFILE filing partner.

    Rejections are returned, not raised: validate_filing reports problems in
    its outcome and submit_filing returns success=False with error details.
    Implementations raise taxxon_core.exceptions.SubmissionError only when
    the partner cannot be reached or answers with an unusable payload.

    Attributes:
        name: Human-readable provider name, used in logs and responses
    """

    name: str

    async def validate_filing(self, request: SubmissionRequest) -> ValidationOutcome:
        """Check a request without submitting it."""
        ...

    async def submit_filing(self, request: SubmissionRequest) -> SubmissionResponse:
        """Submit a request; a successful response carries a confirmation number."""
        ...

    async def check_status(self, confirmation_number: str) -> StatusResponse:
        """Report the current status of a submission.

        An unknown confirmation number yields status ERROR, not an exception.
        """
        ...


@runtime_checkable
class SubmissionStore(Protocol):
    """Protocol for where a provider keeps track of its submissions."""

    def save(self, submission: StoredSubmission) -> None:
        """Insert or replace a submission keyed by its confirmation number."""
        ...

    def get(self, confirmation_number: str) -> Optional[StoredSubmission]:
        """Return the submission, or None when unknown."""
        ...

    def update_status(
        self,
        confirmation_number: str,
        status: SubmissionStatus,
        updated_at: Optional[datetime] = None,
    ) -> Optional[StoredSubmission]:
        """Change a submission's status; returns None when unknown."""
        ...
