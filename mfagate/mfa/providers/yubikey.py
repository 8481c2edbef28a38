"""
Yubikey MFA provider validating OTPs against the YubiCloud service.
"""
import asyncio
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from fastapi import Request, Response
from yubico_client import Yubico
from yubico_client.yubico import BAD_STATUS_CODES
from yubico_client.yubico_exceptions import StatusCodeError

from ..base import MFA_LOGIN_FIELD_NAME, MFAConfig, MFAProvider
from ...config import mfa_section
from ...errors import NoValidUserFound, VerificationFailed, VerificationServiceUnavailable

logger = logging.getLogger(__name__)

WRONG_LENGTH_MESSAGE = "OTP has wrong length."
OTP_MIN_LENGTH = 32
OTP_MAX_LENGTH = 48
DEVICE_ID_LENGTH = 12

STATUS_PATTERN = re.compile(r'status=([A-Z0-9_]+)')


class InvalidOTPError(ValueError):
    pass


def is_wrong_length_error(exc: Exception) -> bool:
    """True if the verification error only means the input is not an OTP."""
    return WRONG_LENGTH_MESSAGE in str(exc)


class YubicoClient(Yubico):
    """Yubico client raising StatusCodeError for every failure status.

    The stock client answers most failure statuses with False, which its
    verify() then reports as a generic NO_VALID_ANSWERS exception.
    """

    def verify_response(self, response, otp, nonce, return_response=False):
        result = super().verify_response(response, otp, nonce, return_response)
        if not result:
            match = STATUS_PATTERN.search(response)
            if match and match.group(1) in BAD_STATUS_CODES:
                raise StatusCodeError(match.group(1))
        return result


class YubicoVerifier:
    """Synchronous YubiCloud client: True if accepted, False if rejected."""

    # Statuses describing a well-formed but wrong proof
    REJECTED_STATUSES = frozenset(["BAD_OTP", "REPLAYED_OTP"])

    def __init__(self, client_id: str, secret_key: str):
        # Yubico decodes the base64 key here, bad keys fail immediately
        self.client = YubicoClient(client_id, secret_key or None, translate_otp=False)

    def verify(self, otp: str) -> bool:
        if not OTP_MIN_LENGTH <= len(otp) <= OTP_MAX_LENGTH:
            raise InvalidOTPError(WRONG_LENGTH_MESSAGE)
        try:
            return bool(self.client.verify(otp))
        except StatusCodeError as e:
            if e.status_code in self.REJECTED_STATUSES:
                return False
            raise


class YubikeyProvider(MFAProvider):
    def __init__(self, verifier_factory: Optional[Callable[[str, str], YubicoVerifier]] = None):
        self.client_id = ""
        self.secret_key = ""
        self.verifier_factory = verifier_factory or YubicoVerifier
        self.login_field_name = MFA_LOGIN_FIELD_NAME
        self.executor = ThreadPoolExecutor(max_workers=5)

    def provider_id(self) -> str:
        return "yubikey"

    def configure(self, document) -> None:
        section = mfa_section(document, self.provider_id())
        self.client_id = str(section.get("client_id") or "")
        self.secret_key = str(section.get("secret_key") or "")
        if not self.secret_key:
            logger.warning("Yubikey secret_key is empty, YubiCloud responses will not be signature checked")

    async def validate_mfa(
        self,
        response: Optional[Response],
        request: Request,
        username: str,
        bindings: List[MFAConfig],
    ) -> None:
        try:
            verifier = self.verifier_factory(self.client_id, self.secret_key)
        except Exception as e:
            raise VerificationServiceUnavailable(f"Unable to create Yubikey client: {e}") from e

        form = await request.form()
        loop = asyncio.get_running_loop()

        for binding in bindings:
            if binding.provider != self.provider_id():
                continue

            device = binding.attribute_string("device")
            key_input = ""
            for key in form.keys():
                value = form.getlist(key)[0]
                if not isinstance(value, str):
                    continue
                if key.endswith(self.login_field_name) and value.startswith(device):
                    key_input = value

            if not key_input:
                continue

            try:
                ok = await loop.run_in_executor(self.executor, verifier.verify, key_input)
            except Exception as e:
                if is_wrong_length_error(e):
                    logger.debug(f"Ignoring malformed OTP for device {key_input[:DEVICE_ID_LENGTH]} of {username}")
                    continue
                logger.error(f"Yubikey verification error for {username}: {e}")
                raise VerificationFailed(f"OTP verification failed: {e}") from e

            if ok:
                logger.info(f"Yubikey OTP accepted for {username} (device {key_input[:DEVICE_ID_LENGTH]})")
                return

        raise NoValidUserFound()
