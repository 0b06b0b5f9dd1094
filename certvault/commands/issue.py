"""
Certificate issuance command for certvault.

This module wires together one run of the tool:
- Build the issuance configuration (VAULT_ADDR, token file, ttl, role)
- Either sign an external signing request (-csr) or have Vault generate a
  key pair and certificate for the requested subject
- Write the returned artifacts to <prefix>.crt and, when generated, <prefix>.key
"""

import argparse
from typing import Optional

from certvault.lib.certificate import print_certificate_information
from certvault.lib.config import IssuanceConfig
from certvault.lib.errors import InputError
from certvault.lib.files import save_certificate_pair, save_signed_certificate
from certvault.lib.logger import logging
from certvault.lib.request import build_request
from certvault.lib.vault import IssuanceClient


def read_csr(path: str) -> bytes:
    """
    Read an externally supplied signing request.

    Raises:
        InputError: If the file cannot be read
    """
    logging.debug(f"Reading signing request from {path!r}")
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise InputError(f"could not read signing request {path!r}: {e}") from e


def sign(client: IssuanceClient, csr_path: str, common_name: str, prefix: str) -> str:
    """Sign mode: only a certificate comes back, no key is written."""
    csr = read_csr(csr_path)
    certificate = client.sign_existing_request(csr, common_name)
    print_certificate_information(certificate)

    logging.info(f"Saving certificate to {prefix!r}")
    path = save_signed_certificate(certificate, prefix)
    logging.info(f"Wrote certificate to {path!r}")
    return path


def generate(
    client: IssuanceClient,
    common_name: str,
    prefix: str,
    alt: Optional[str] = None,
    ips: Optional[str] = None,
    org: Optional[str] = None,
) -> None:
    """Generate mode: the authority creates the key pair and certificate."""
    request = build_request(common_name, alt, ips, org)
    result = client.generate_certificate(request)
    print_certificate_information(result.certificate)

    cert_path, key_path = save_certificate_pair(
        result.certificate, result.private_key, prefix  # type: ignore
    )
    logging.info(f"Wrote certificate to {cert_path!r}")
    logging.info(f"Wrote private key to {key_path!r}")


# =========================================================================
# Command-line entry point
# =========================================================================


def entry(options: argparse.Namespace) -> None:
    """
    Command-line entry point for certificate issuance.

    Args:
        options: Command-line arguments
    """
    common_name = options.common_name
    prefix = options.output_prefix or common_name

    if not common_name:
        raise InputError("a common name is required")

    config = IssuanceConfig.from_options(options)

    with IssuanceClient(config) as client:
        if options.csr:
            sign(client, options.csr, common_name, prefix)
        else:
            generate(client, common_name, prefix, options.alt, options.ips, options.org)
