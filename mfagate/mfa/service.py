"""
MFA orchestration service.
"""
import logging
from typing import List, Optional

from fastapi import Request, Response

from .base import MFAConfig, MFAProvider
from ..errors import NoValidUserFound
from ..observability.metrics import mfa_validations_counter

logger = logging.getLogger(__name__)


class MFAService:
    def __init__(self, providers: List[MFAProvider]):
        self.providers = list(providers)

    def provider_ids(self) -> List[str]:
        return [p.provider_id() for p in self.providers]

    async def validate(
        self,
        response: Optional[Response],
        request: Request,
        username: str,
        bindings: List[MFAConfig],
    ) -> None:
        """Run the providers in order, the first one that accepts wins."""
        if not bindings:
            # User has no second factor configured
            return

        for provider in self.providers:
            provider_id = provider.provider_id()
            try:
                await provider.validate_mfa(response, request, username, bindings)
            except NoValidUserFound:
                mfa_validations_counter.labels(provider=provider_id, result="no_match").inc()
                continue
            except Exception:
                mfa_validations_counter.labels(provider=provider_id, result="error").inc()
                raise
            mfa_validations_counter.labels(provider=provider_id, result="success").inc()
            return

        logger.warning(f"MFA validation failed for {username}")
        raise NoValidUserFound()
