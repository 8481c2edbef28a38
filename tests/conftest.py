import pytest
from starlette.datastructures import FormData

from mfagate.mfa.base import MFAConfig
from mfagate.mfa.providers.yubikey import WRONG_LENGTH_MESSAGE, YubikeyProvider

YUBIKEY_CONFIG = b"""
mfa:
  yubikey:
    client_id: "12345"
    secret_key: "c2VjcmV0"
"""


class FormRequest:
    """Minimal stand-in for a request with parsed form data."""

    def __init__(self, fields):
        self._form = FormData(fields)

    async def form(self):
        return self._form


class StubVerifier:
    """Verification service double: maps an OTP to True, False or an exception."""

    def __init__(self, results=None, default=False):
        self.results = results or {}
        self.default = default
        self.calls = []

    def verify(self, otp):
        self.calls.append(otp)
        result = self.results.get(otp, self.default)
        if isinstance(result, Exception):
            raise result
        return result


def wrong_length():
    return ValueError(WRONG_LENGTH_MESSAGE)


def yubikey(device):
    return MFAConfig(provider="yubikey", attributes={"device": device})


@pytest.fixture
def verifier():
    return StubVerifier()


@pytest.fixture
def provider(verifier):
    p = YubikeyProvider(verifier_factory=lambda client_id, secret_key: verifier)
    p.configure(YUBIKEY_CONFIG)
    return p
