"""Taxxon NETFILE - electronic filing through NETFILE partners."""

from taxxon_netfile.config import NetfileConfig, NetfileProviderName, TaxxonConfig
from taxxon_netfile.log import configure_logging
from taxxon_netfile.providers.mock import MockNetfileProvider
from taxxon_netfile.service import PROVIDER_FACTORIES, NetfileService
from taxxon_netfile.store import InMemorySubmissionStore
from taxxon_netfile.transformer import transform_filing_to_submission_request

__version__ = "0.1.0"

__all__ = [
    "NetfileConfig",
    "NetfileProviderName",
    "TaxxonConfig",
    "configure_logging",
    "MockNetfileProvider",
    "InMemorySubmissionStore",
    "NetfileService",
    "PROVIDER_FACTORIES",
    "transform_filing_to_submission_request",
]
