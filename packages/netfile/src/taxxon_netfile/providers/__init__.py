"""NETFILE provider implementations, one per partner.

To add a partner: implement the NetfileProvider protocol in a module here,
then register a factory under its configuration key in
taxxon_netfile.service.PROVIDER_FACTORIES.
"""

from taxxon_netfile.providers.mock import MockNetfileProvider

__all__ = ["MockNetfileProvider"]
