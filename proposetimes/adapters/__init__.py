"""
Adapters layer - External integrations (SavvyCal and Cal.com APIs).
"""

from ..config import AppConfig
from ..domain.exceptions import ProviderConfigError
from .calcom_client import CalComClient
from .mock_client import MockProviderClient
from .savvycal_client import SavvyCalClient

__all__ = [
    "CalComClient",
    "MockProviderClient",
    "SavvyCalClient",
    "get_provider_client",
]


def get_provider_client(config: AppConfig, provider: str | None = None):
    """
    Build the provider client selected in the configuration.

    Args:
        config: Application configuration
        provider: Optional override of ``config.provider``

    Raises:
        ProviderConfigError: If the provider is unknown
    """
    name = provider or config.provider

    if name == "savvycal":
        return SavvyCalClient(
            token=config.savvycal.token,
            link_slug=config.savvycal.link
        )
    if name == "calcom":
        return CalComClient(
            username=config.calcom.username,
            event_slug=config.calcom.event_slug
        )
    if name == "mock":
        return MockProviderClient(
            timezone=config.timezone,
            increment_minutes=config.selection.increment_minutes
        )

    raise ProviderConfigError(f"Unknown provider: {name}")
