"""Custom exceptions for the Taxxon filing engine.

All exceptions inherit from TaxxonError, making it easy to catch every
application-specific error in one place.

The calculation, suggestion and cross-validation functions never raise on
numeric input. These exceptions cover misuse of the filing lifecycle,
boundary validation and configuration problems.

Example:
    try:
        filing.mark_submitted(summary, confirmation_number)
    except FilingStateError as e:
        logger.warning("duplicate_submission", filing_id=filing.id, error=str(e))
    except TaxxonError as e:
        logger.error("submission_failed", error=str(e))
"""

from typing import Any, Optional


class TaxxonError(Exception):
    """Base exception for all Taxxon errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(TaxxonError):
    """Error raised when boundary data fails validation.

    Raised when an extracted document or user-entered payload cannot be
    turned into a typed record at all (unknown document type, wrong shape).
    Individual unparseable amounts are not errors; they are coerced to zero.

    Example:
        >>> raise ValidationError(
        ...     "Unknown document type",
        ...     field="documentType",
        ...     value="w2",
        ...     constraint="Must be one of: t4, t4a, t5, ...",
        ... )
        ValidationError: Unknown document type
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class RecordNotFoundError(TaxxonError):
    """Error raised when a slip or deduction record id is not in the filing."""

    def __init__(
        self,
        message: str,
        *,
        record_id: Optional[str] = None,
        filing_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=True)
        self.record_id = record_id
        self.filing_id = filing_id

        if record_id:
            self.details["record_id"] = record_id
        if filing_id:
            self.details["filing_id"] = filing_id


class FilingStateError(TaxxonError):
    """Error raised when a lifecycle transition is not allowed.

    A filing is submitted exactly once; editing or re-submitting a
    submitted filing raises this error.

    Attributes:
        current_status: Status of the filing when the transition was attempted.
        attempted: Name of the rejected transition or operation.
    """

    def __init__(
        self,
        message: str,
        *,
        current_status: Optional[str] = None,
        attempted: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.current_status = current_status
        self.attempted = attempted

        if current_status:
            self.details["current_status"] = current_status
        if attempted:
            self.details["attempted"] = attempted


class ConfigurationError(TaxxonError):
    """Error raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError(
        ...     "Unknown NETFILE provider",
        ...     config_key="TAXXON_NETFILE_PROVIDER",
        ...     expected="One of: mock",
        ...     actual="acme",
        ... )
        ConfigurationError: Unknown NETFILE provider
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class SubmissionError(TaxxonError):
    """Error raised when a filing-partner provider fails at the transport level.

    Rejections by the partner are not errors; they come back as an
    unsuccessful submission response. This covers providers that cannot
    be reached or return an unusable payload.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.provider = provider
        self.operation = operation

        if provider:
            self.details["provider"] = provider
        if operation:
            self.details["operation"] = operation


__all__ = [
    "TaxxonError",
    "ValidationError",
    "RecordNotFoundError",
    "FilingStateError",
    "ConfigurationError",
    "SubmissionError",
]
