from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import Request, Response

# Every provider reads its OTP from form fields whose name ends with this
# suffix, so several providers can share a single login form.
MFA_LOGIN_FIELD_NAME = "mfa-token"


@dataclass
class MFAConfig:
    """One enrollment of a user with one MFA provider."""
    provider: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    def attribute_string(self, name: str, default: str = "") -> str:
        value = self.attributes.get(name)
        if value is None:
            return default
        return value if isinstance(value, str) else str(value)


class MFAProvider(ABC):
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier of this provider inside the registry."""

    @abstractmethod
    def configure(self, document) -> None:
        """Load provider settings from the raw YAML configuration.

        Raises ProviderUnconfigured when the document has no section for
        this provider.
        """

    @abstractmethod
    async def validate_mfa(
        self,
        response: Optional[Response],
        request: Request,
        username: str,
        bindings: List[MFAConfig],
    ) -> None:
        """Validate the MFA proof carried by the request.

        Returns on success, raises NoValidUserFound when no binding matched.
        """
