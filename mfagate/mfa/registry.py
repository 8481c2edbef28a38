"""
Provider registry - builds the list of active MFA providers at startup.
"""
import logging
from typing import List, Optional

from .base import MFAProvider
from .providers.yubikey import YubikeyProvider
from ..errors import ProviderUnconfigured

logger = logging.getLogger(__name__)


def available_providers() -> List[MFAProvider]:
    """Fresh instances of every provider implementation."""
    return [YubikeyProvider()]


def initialize_providers(document, providers: Optional[List[MFAProvider]] = None) -> List[MFAProvider]:
    """Configure each provider and return those present in the document.

    Providers without a configuration section are skipped, any other
    configuration error propagates.
    """
    if providers is None:
        providers = available_providers()

    active = []
    for provider in providers:
        try:
            provider.configure(document)
        except ProviderUnconfigured:
            logger.info(f"MFA provider {provider.provider_id()} not configured, skipping")
            continue
        logger.info(f"MFA provider {provider.provider_id()} enabled")
        active.append(provider)
    return active
