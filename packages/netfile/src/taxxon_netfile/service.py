"""NETFILE submission service.

Ties the pieces together for one filing:

    calculate summary -> transform to request -> provider -> update filing

The provider is chosen by the caller, either directly or from configuration
through an explicit registry; nothing here reads the environment.
"""

from datetime import timedelta
from typing import Callable, Optional

import structlog

from taxxon_core.aggregation import aggregate_filing
from taxxon_core.calculator import TaxCalculator
from taxxon_core.exceptions import ConfigurationError, FilingStateError, SubmissionError
from taxxon_core.models import Filing, FilingStatus

from taxxon_netfile.config import NetfileConfig
from taxxon_netfile.interfaces.base import NetfileProvider, SubmissionStore
from taxxon_netfile.interfaces.types import (
    StatusResponse,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionStatus,
    ValidationOutcome,
)
from taxxon_netfile.providers.mock import Clock, MockNetfileProvider
from taxxon_netfile.transformer import transform_filing_to_submission_request

logger = structlog.get_logger()

ProviderFactory = Callable[[NetfileConfig, SubmissionStore, Optional[Clock]], NetfileProvider]


def _mock_factory(
    config: NetfileConfig,
    store: SubmissionStore,
    clock: Optional[Clock] = None,
) -> NetfileProvider:
    kwargs = {}
    if clock is not None:
        kwargs["clock"] = clock
    return MockNetfileProvider(
        store,
        acceptance_delay=timedelta(seconds=config.acceptance_delay_seconds),
        min_tax_year=config.min_tax_year,
        **kwargs,
    )


# Provider registry: configuration key -> factory
PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "mock": _mock_factory,
}


class NetfileService:
    """
    Submit filings through a NETFILE provider.

    Rejections come back as responses and leave the filing untouched; only
    lifecycle misuse (submitting twice, refreshing an unsubmitted filing)
    and provider transport failures raise.
    """

    def __init__(
        self,
        provider: NetfileProvider,
        calculator: Optional[TaxCalculator] = None,
    ):
        """
        Args:
            provider: Filing partner to submit through
            calculator: Tax calculator (default: per-receipt donation credit)
        """
        self.provider = provider
        self.calculator = calculator or TaxCalculator()

    @classmethod
    def from_config(
        cls,
        config: NetfileConfig,
        store: SubmissionStore,
        clock: Optional[Clock] = None,
        calculator: Optional[TaxCalculator] = None,
    ) -> "NetfileService":
        """
        Build a service with the provider named in configuration.

        Raises:
            ConfigurationError: When no provider is registered under the name
        """
        factory = PROVIDER_FACTORIES.get(config.provider)
        if factory is None:
            raise ConfigurationError(
                f"Unknown NETFILE provider: {config.provider}",
                config_key="TAXXON_NETFILE_PROVIDER",
                expected=f"One of: {', '.join(sorted(PROVIDER_FACTORIES))}",
                actual=config.provider,
            )
        return cls(factory(config, store, clock), calculator=calculator)

    @property
    def provider_name(self) -> str:
        return self.provider.name

    def build_request(self, filing: Filing) -> SubmissionRequest:
        """Calculate the summary and build the partner request for a filing."""
        totals = aggregate_filing(filing)
        summary = self.calculator.calculate(filing)
        return transform_filing_to_submission_request(filing, summary, totals)

    async def validate(self, filing: Filing) -> ValidationOutcome:
        """Ask the provider to check a filing without submitting it."""
        outcome = await self.provider.validate_filing(self.build_request(filing))
        logger.info(
            "filing_validated",
            filing_id=filing.id,
            provider=self.provider_name,
            valid=outcome.valid,
            errors=len(outcome.errors),
        )
        return outcome

    async def submit(self, filing: Filing) -> SubmissionResponse:
        """
        Submit a filing and record the result on it.

        Args:
            filing: Filing to submit; marked submitted on success

        Returns:
            The provider's response; on rejection the filing is unchanged

        Raises:
            FilingStateError: When the filing was already submitted
            SubmissionError: When the provider reports success without a
                confirmation number
        """
        if filing.is_submitted:
            raise FilingStateError(
                f"Filing {filing.id} was already submitted",
                current_status=filing.status.value,
                attempted="submit",
            )

        summary = self.calculator.calculate(filing)
        request = transform_filing_to_submission_request(
            filing, summary, aggregate_filing(filing)
        )

        logger.info("filing_submission_started", filing_id=filing.id, provider=self.provider_name)
        response = await self.provider.submit_filing(request)

        if not response.success:
            logger.warning(
                "filing_submission_rejected",
                filing_id=filing.id,
                provider=self.provider_name,
                status=response.status.value,
                errors=[e.code for e in response.errors],
            )
            return response

        if not response.confirmation_number:
            raise SubmissionError(
                "Provider reported success without a confirmation number",
                provider=self.provider_name,
                operation="submit_filing",
            )

        filing.mark_submitted(summary, response.confirmation_number, response.timestamp)
        logger.info(
            "filing_submitted",
            filing_id=filing.id,
            provider=self.provider_name,
            confirmation_number=response.confirmation_number,
        )
        return response

    async def check_status(self, confirmation_number: str) -> StatusResponse:
        return await self.provider.check_status(confirmation_number)

    async def refresh(self, filing: Filing) -> StatusResponse:
        """
        Check a submitted filing's status and mark it accepted when it is.

        Raises:
            FilingStateError: When the filing has not been submitted
        """
        if not filing.is_submitted or not filing.confirmation_number:
            raise FilingStateError(
                f"Filing {filing.id} has not been submitted",
                current_status=filing.status.value,
                attempted="refresh",
            )

        status = await self.check_status(filing.confirmation_number)
        if (
            status.status == SubmissionStatus.ACCEPTED
            and filing.status == FilingStatus.SUBMITTED
        ):
            filing.mark_accepted()
            logger.info(
                "filing_accepted",
                filing_id=filing.id,
                confirmation_number=filing.confirmation_number,
            )
        return status
