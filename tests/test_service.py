import pytest

from mfagate.errors import NoValidUserFound, ProviderUnconfigured, VerificationFailed
from mfagate.mfa.base import MFAConfig, MFAProvider
from mfagate.mfa.providers.yubikey import YubikeyProvider
from mfagate.mfa.registry import available_providers, initialize_providers
from mfagate.mfa.service import MFAService

from conftest import YUBIKEY_CONFIG, FormRequest, yubikey


class FakeProvider(MFAProvider):
    def __init__(self, name, outcome=None, configured=True):
        self.name = name
        self.outcome = outcome
        self.configured = configured
        self.calls = 0

    def provider_id(self):
        return self.name

    def configure(self, document):
        if not self.configured:
            raise ProviderUnconfigured(self.name)

    async def validate_mfa(self, response, request, username, bindings):
        self.calls += 1
        if self.outcome is not None:
            raise self.outcome


def test_available_providers():
    assert [p.provider_id() for p in available_providers()] == ["yubikey"]


def test_initialize_skips_unconfigured():
    configured = FakeProvider("totp")
    unconfigured = FakeProvider("duo", configured=False)
    active = initialize_providers(YUBIKEY_CONFIG, [unconfigured, configured])
    assert active == [configured]


def test_initialize_yubikey_from_document():
    active = initialize_providers(YUBIKEY_CONFIG)
    assert [p.provider_id() for p in active] == ["yubikey"]
    assert initialize_providers(b"mfa: {}\n") == []


async def test_no_bindings_succeeds_without_providers_running():
    provider = FakeProvider("totp", outcome=NoValidUserFound())
    await MFAService([provider]).validate(None, FormRequest([]), "alice", [])
    assert provider.calls == 0


async def test_chain_moves_on_after_no_match():
    first = FakeProvider("totp", outcome=NoValidUserFound())
    second = FakeProvider("yubikey")
    third = FakeProvider("duo")
    await MFAService([first, second, third]).validate(None, FormRequest([]), "alice", [yubikey("x")])
    assert (first.calls, second.calls, third.calls) == (1, 1, 0)


async def test_chain_propagates_errors():
    first = FakeProvider("yubikey", outcome=VerificationFailed("boom"))
    second = FakeProvider("totp")
    with pytest.raises(VerificationFailed):
        await MFAService([first, second]).validate(None, FormRequest([]), "alice", [yubikey("x")])
    assert second.calls == 0


async def test_chain_exhausted():
    service = MFAService([FakeProvider("totp", outcome=NoValidUserFound())])
    with pytest.raises(NoValidUserFound):
        await service.validate(None, FormRequest([]), "alice", [MFAConfig(provider="totp")])


async def test_chain_with_yubikey_provider(verifier):
    verifier.default = True
    provider = YubikeyProvider(verifier_factory=lambda client_id, secret_key: verifier)
    service = MFAService(initialize_providers(YUBIKEY_CONFIG, [FakeProvider("totp", outcome=NoValidUserFound()), provider]))
    assert service.provider_ids() == ["totp", "yubikey"]
    await service.validate(None, FormRequest([("mfa-token", "vvincvtgtlafxyz")]), "alice", [yubikey("vvincvtgtlaf")])
    assert verifier.calls == ["vvincvtgtlafxyz"]
