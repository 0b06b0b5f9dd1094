"""
Issuance configuration for certvault.

The configuration is assembled once at startup from command-line options,
the environment and the Vault token file, and is immutable afterwards.
"""

import argparse
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Mapping, Optional

from certvault.lib.constants import (
    DEFAULT_MOUNT,
    DEFAULT_PROFILE,
    DEFAULT_TTL,
    ENV_VAULT_ADDR,
    ENV_VAULT_PKI_PROFILE,
    TOKEN_FILE_NAME,
)
from certvault.lib.errors import ConfigurationError
from certvault.lib.logger import logging
from certvault.lib.time import duration_to_str, parse_duration


@dataclass(frozen=True)
class IssuanceConfig:
    """
    Everything the Vault client needs for one issuance.

    Attributes:
        address: Base address of the Vault server
        token: Vault token, never logged
        mount_point: Mount point of the PKI secrets engine
        role: PKI role (profile) to issue against
        ttl: Default time-to-live of issued certificates
        insecure: Skip TLS verification of the Vault server certificate
    """

    address: str
    token: str = field(repr=False)
    mount_point: str = DEFAULT_MOUNT
    role: str = DEFAULT_PROFILE
    ttl: timedelta = timedelta(hours=8760)
    insecure: bool = False

    @classmethod
    def from_options(
        cls,
        options: argparse.Namespace,
        environ: Optional[Mapping[str, str]] = None,
        token_path: Optional[str] = None,
    ) -> "IssuanceConfig":
        """
        Build the configuration from parsed options.

        VAULT_ADDR is checked before anything else, so a missing address
        fails without touching the filesystem or the network.

        Args:
            options: Parsed command-line arguments
            environ: Environment to read (default: os.environ)
            token_path: Token file (default: ~/.vault-token)

        Raises:
            ConfigurationError: If VAULT_ADDR is unset or the token is unreadable
            InvalidDuration: If the ttl option is malformed
        """
        if environ is None:
            environ = os.environ

        address = resolve_address(environ)
        role = resolve_profile(getattr(options, "profile", None), environ)

        ttl_option = getattr(options, "ttl", DEFAULT_TTL)
        ttl = parse_duration(ttl_option) if ttl_option else parse_duration(DEFAULT_TTL)

        token = read_token(token_path or default_token_path())

        config = cls(
            address=address,
            token=token,
            mount_point=getattr(options, "mount", None) or DEFAULT_MOUNT,
            role=role,
            ttl=ttl,
            insecure=bool(getattr(options, "insecure", False)),
        )

        logging.debug(
            f"Using Vault at {config.address!r}, mount {config.mount_point!r}, "
            f"role {config.role!r}, ttl {duration_to_str(config.ttl)}"
        )
        if config.insecure:
            logging.warning("TLS certificate verification of the Vault server is disabled")

        return config


def resolve_address(environ: Mapping[str, str]) -> str:
    address = environ.get(ENV_VAULT_ADDR, "")
    if not address:
        raise ConfigurationError(
            f"no {ENV_VAULT_ADDR} set; no vault server to get information from"
        )
    return address.rstrip("/")


def resolve_profile(profile: Optional[str], environ: Mapping[str, str]) -> str:
    """
    Flag first, then VAULT_PKI_PROFILE, then the fixed default.

    An explicitly empty flag still overrides the environment and selects
    the default.
    """
    if profile is not None:
        return profile or DEFAULT_PROFILE
    return environ.get(ENV_VAULT_PKI_PROFILE) or DEFAULT_PROFILE


def default_token_path() -> str:
    home = os.path.expanduser("~")
    if home == "~":
        raise ConfigurationError("could not determine the home directory")
    return os.path.join(home, TOKEN_FILE_NAME)


def read_token(path: str) -> str:
    """
    Read the Vault token from a file.

    Raises:
        ConfigurationError: If the file cannot be read, is empty or does not
            hold a plain ASCII token
    """
    logging.debug(f"Reading Vault token from {path!r}")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ConfigurationError(f"could not read Vault token from {path!r}: {e}") from e

    # Sent as an HTTP header value
    try:
        token = data.decode("ascii").strip()
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Vault token file {path!r} is not ASCII text: {e}") from e

    if not token:
        raise ConfigurationError(f"Vault token file {path!r} is empty")
    return token
