"""
Constants module for certvault.

Environment variable names, defaults and well-known paths shared by the
configuration layer, the command-line parser and the Vault client.
"""

from certvault import version

# =========================================================================
# Environment
# =========================================================================

# Base address of the Vault server, e.g. https://vault.example.com:8200
ENV_VAULT_ADDR = "VAULT_ADDR"

# Default role/profile, overridden by -profile
ENV_VAULT_PKI_PROFILE = "VAULT_PKI_PROFILE"

# Token file written by `vault login`, relative to the home directory
TOKEN_FILE_NAME = ".vault-token"

# =========================================================================
# Defaults
# =========================================================================

DEFAULT_MOUNT = "pki"
DEFAULT_PROFILE = "pki"
DEFAULT_TTL = "8760h"

# =========================================================================
# HTTP
# =========================================================================

USER_AGENT = f"certvault/{version.version}"

# Header carrying the bearer token on every request
TOKEN_HEADER = "X-Vault-Token"

API_PREFIX = "/v1"

# =========================================================================
# Output files
# =========================================================================

CERTIFICATE_SUFFIX = ".crt"
PRIVATE_KEY_SUFFIX = ".key"

CERTIFICATE_FILE_MODE = 0o640
PRIVATE_KEY_FILE_MODE = 0o600

# Sent in place of an IP SAN that could not be parsed
ZERO_IP = "0.0.0.0"
