"""
Parser for the certificate issuance command.

This module defines the command-line interface of certvault:

    certvault [options] <common_name> [output_prefix]
"""

import argparse

from certvault.lib.constants import (
    DEFAULT_MOUNT,
    DEFAULT_TTL,
    ENV_VAULT_ADDR,
    ENV_VAULT_PKI_PROFILE,
    TOKEN_FILE_NAME,
)

# Command name identifier
NAME = "issue"

EPILOG = f"""environment:
  {ENV_VAULT_ADDR}           address of the Vault server (required)
  {ENV_VAULT_PKI_PROFILE}   default role, overridden by -profile

The Vault token is read from ~/{TOKEN_FILE_NAME}.
"""


def entry(options: argparse.Namespace) -> None:
    """
    Entry point for the issuance command.

    Args:
        options: Parsed command-line arguments
    """
    from certvault.commands import issue

    issue.entry(options)


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add the issuance options and positional arguments to a parser.

    Args:
        parser: Parser to configure
    """
    parser.add_argument(
        "common_name",
        action="store",
        metavar="common_name",
        help="Common name of the certificate subject",
    )
    parser.add_argument(
        "output_prefix",
        action="store",
        nargs="?",
        metavar="cert_prefix",
        help="Prefix of the output files <prefix>.crt and <prefix>.key (default: common name)",
    )

    # Vault options
    vault_group = parser.add_argument_group("vault options")
    vault_group.add_argument(
        "-mount",
        action="store",
        metavar="mount point",
        default=DEFAULT_MOUNT,
        help=f"Vault mount point of the PKI secrets engine (default: {DEFAULT_MOUNT})",
    )
    vault_group.add_argument(
        "-profile",
        action="store",
        metavar="role",
        default=None,
        help=f"Vault PKI role to use (default: ${ENV_VAULT_PKI_PROFILE} or pki)",
    )
    vault_group.add_argument(
        "-k",
        action="store_true",
        dest="insecure",
        help="Allow an insecure Vault serving certificate (skip TLS verification)",
    )

    # Certificate request parameters
    cert_group = parser.add_argument_group("certificate request options")
    cert_group.add_argument(
        "-ttl",
        action="store",
        metavar="duration",
        default=DEFAULT_TTL,
        help=f"Requested validity of the certificate, e.g. 24h (default: {DEFAULT_TTL})",
    )
    cert_group.add_argument(
        "-alt",
        action="store",
        metavar="alternative names",
        default="",
        help="Server alternate DNS names, comma-separated",
    )
    cert_group.add_argument(
        "-ips",
        action="store",
        metavar="ip addresses",
        default="",
        help="IP server alternate names, comma-separated",
    )
    cert_group.add_argument(
        "-org",
        action="store",
        metavar="organization",
        default="",
        help="Subject organization and organizational unit, comma-separated",
    )
    cert_group.add_argument(
        "-csr",
        action="store",
        metavar="csr file name",
        help="Have Vault sign this certificate signing request instead of generating a key",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Create the top-level certvault parser.
    """
    parser = argparse.ArgumentParser(
        prog="certvault",
        add_help=False,
        description="Obtain certificates from a Vault PKI secrets engine",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Show certvault's version number and exit",
        default=argparse.SUPPRESS,
    )
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit",
    )
    parser.add_argument(
        "-debug",
        action="store_true",
        help="Enable debug output and stacktraces",
    )

    add_arguments(parser)
    return parser
