"""Mock NETFILE provider for development and testing.

Behaves like a partner without talking to one: validates the request with
basic checks, issues CRA-style confirmation numbers and reports acceptance
once a configurable delay has passed. Submissions live in the injected
SubmissionStore; time comes from the injected clock, so tests can move it.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

import structlog

from taxxon_netfile.interfaces.base import SubmissionStore
from taxxon_netfile.interfaces.types import (
    StatusResponse,
    StoredSubmission,
    SubmissionErrorDetail,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionStatus,
    ValidationOutcome,
)

logger = structlog.get_logger()

Clock = Callable[[], datetime]

FORMATTED_SIN_LENGTH = 11  # XXX-XXX-XXX
ASSESSMENT_DELAY = timedelta(days=14)

MOCK_WARNINGS = (
    "This is a mock submission for development purposes.",
    "In production, connect to a certified NETFILE partner.",
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MockNetfileProvider:
    """NetfileProvider that accepts every valid submission after a delay."""

    name = "Mock Provider (Development)"

    def __init__(
        self,
        store: SubmissionStore,
        acceptance_delay: timedelta = timedelta(seconds=5),
        clock: Clock = _utc_now,
        min_tax_year: int = 2020,
    ):
        """
        Args:
            store: Where submissions are kept
            acceptance_delay: Time after submission before status becomes accepted
            clock: Source of the current time
            min_tax_year: Earliest tax year accepted
        """
        self.store = store
        self.acceptance_delay = acceptance_delay
        self.clock = clock
        self.min_tax_year = min_tax_year

    def _validation_errors(self, request: SubmissionRequest) -> list[str]:
        errors = []
        personal = request.personal_info

        if not personal.sin or len(personal.sin) != FORMATTED_SIN_LENGTH:
            errors.append("Invalid SIN format")
        if not personal.first_name or not personal.last_name:
            errors.append("Name is required")
        if request.calculated.total_income < 0:
            errors.append("Total income cannot be negative")
        if not self.min_tax_year <= request.tax_year <= self.clock().year:
            errors.append("Invalid tax year")

        return errors

    async def validate_filing(self, request: SubmissionRequest) -> ValidationOutcome:
        errors = self._validation_errors(request)
        return ValidationOutcome(valid=not errors, errors=errors)

    async def submit_filing(self, request: SubmissionRequest) -> SubmissionResponse:
        now = self.clock()
        errors = self._validation_errors(request)
        if errors:
            logger.info(
                "mock_submission_rejected",
                filing_id=request.filing_id,
                errors=errors,
            )
            return SubmissionResponse(
                success=False,
                status=SubmissionStatus.REJECTED,
                timestamp=now,
                errors=[
                    SubmissionErrorDetail(code=f"VALIDATION_{i}", message=message)
                    for i, message in enumerate(errors, start=1)
                ],
            )

        confirmation_number = f"CRA-{request.tax_year}-{uuid4().hex[:8].upper()}"
        self.store.save(
            StoredSubmission(
                confirmation_number=confirmation_number,
                request=request,
                status=SubmissionStatus.SUBMITTED,
                submitted_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "mock_submission_stored",
            filing_id=request.filing_id,
            confirmation_number=confirmation_number,
        )

        return SubmissionResponse(
            success=True,
            confirmation_number=confirmation_number,
            status=SubmissionStatus.SUBMITTED,
            timestamp=now,
            warnings=list(MOCK_WARNINGS),
        )

    def _settle(self, submission: StoredSubmission, now: datetime) -> StoredSubmission:
        """Flip a submitted filing to accepted once the delay has passed."""
        if (
            submission.status == SubmissionStatus.SUBMITTED
            and now - submission.submitted_at >= self.acceptance_delay
        ):
            accepted = self.store.update_status(
                submission.confirmation_number, SubmissionStatus.ACCEPTED, now
            )
            if accepted is not None:
                logger.info(
                    "mock_submission_accepted",
                    confirmation_number=submission.confirmation_number,
                )
                return accepted
        return submission

    async def check_status(self, confirmation_number: str) -> StatusResponse:
        now = self.clock()
        submission = self.store.get(confirmation_number)
        if submission is None:
            return StatusResponse(filing_id="", status=SubmissionStatus.ERROR, last_updated=now)

        submission = self._settle(submission, now)
        assessment_date: Optional[datetime] = None
        if submission.status == SubmissionStatus.ACCEPTED:
            assessment_date = now + ASSESSMENT_DELAY

        return StatusResponse(
            filing_id=submission.request.filing_id,
            confirmation_number=confirmation_number,
            status=submission.status,
            last_updated=now,
            cra_assessment_date=assessment_date,
        )
