"""
Configuration loading - the YAML document shared by all providers and the
per-user MFA bindings.

    mfa:
      yubikey:
        client_id: "12345"
        secret_key: "c2VjcmV0"

    mfa_users:
      alice:
        - provider: yubikey
          attributes:
            device: vvincvtgtlaf
"""
import logging
import os
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigParseError, ProviderUnconfigured
from .mfa.base import MFAConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


def load_config_document(path: Optional[str] = None) -> bytes:
    """Read the raw configuration document from disk."""
    path = path or os.getenv("MFAGATE_CONFIG", DEFAULT_CONFIG_PATH)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ConfigParseError(f"Unable to read config file {path}: {e}") from e


def parse_document(document: Union[bytes, str]) -> Dict[str, Any]:
    """Parse the YAML document into a mapping. An empty document is {}."""
    try:
        data = yaml.safe_load(document)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Unable to parse config: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError("Config root must be a mapping")
    return data


def mfa_section(document: Union[bytes, str], provider_id: str) -> Dict[str, Any]:
    """Return the `mfa.<provider_id>` subsection of the document.

    Raises ProviderUnconfigured if the subsection is absent or empty.
    """
    mfa = parse_document(document).get("mfa")
    if mfa is None:
        raise ProviderUnconfigured(f"No MFA configuration for {provider_id}")
    if not isinstance(mfa, dict):
        raise ConfigParseError("'mfa' section must be a mapping")

    section = mfa.get(provider_id)
    if section is None:
        raise ProviderUnconfigured(f"No MFA configuration for {provider_id}")
    if not isinstance(section, dict):
        raise ConfigParseError(f"'mfa.{provider_id}' section must be a mapping")
    return section


def load_user_bindings(document: Union[bytes, str]) -> Dict[str, List[MFAConfig]]:
    """Parse the `mfa_users` section into MFAConfig lists keyed by username."""
    users = parse_document(document).get("mfa_users")
    if users is None:
        return {}
    if not isinstance(users, dict):
        raise ConfigParseError("'mfa_users' section must be a mapping")

    bindings = {}
    for username, entries in users.items():
        if entries is None:
            bindings[str(username)] = []
            continue
        if not isinstance(entries, list):
            raise ConfigParseError(f"MFA bindings for {username} must be a list")
        user_bindings = []
        for entry in entries:
            if not isinstance(entry, dict) or "provider" not in entry:
                raise ConfigParseError(f"Invalid MFA binding for {username}: {entry!r}")
            attributes = entry.get("attributes") or {}
            if not isinstance(attributes, dict):
                raise ConfigParseError(f"Attributes of MFA binding for {username} must be a mapping")
            user_bindings.append(MFAConfig(provider=str(entry["provider"]), attributes=dict(attributes)))
        bindings[str(username)] = user_bindings

    logger.debug(f"Loaded MFA bindings for {len(bindings)} users")
    return bindings
