"""
Error taxonomy shared by the config loader, the providers and the MFA chain.
"""


class MFAGateError(Exception):
    """Base class for all mfagate errors."""


class ProviderUnconfigured(MFAGateError):
    """The provider has no section in the configuration and stays disabled."""


class ConfigParseError(MFAGateError):
    """The configuration document could not be read or parsed."""


class VerificationServiceUnavailable(MFAGateError):
    """The client for the external verification service could not be created."""


class VerificationFailed(MFAGateError):
    """The external verification service returned an unexpected error."""


class NoValidUserFound(MFAGateError):
    """No configured device produced an accepted one-time password."""

    def __init__(self, message="no valid user found"):
        super().__init__(message)
