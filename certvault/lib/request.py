"""
Certificate request construction.

Turns the identity attributes given on the command line into an immutable
CertificateRequestSpec. This module performs no network or filesystem access.
"""

import ipaddress
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from certvault.lib.errors import InputError
from certvault.lib.logger import logging

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class CertificateRequestSpec:
    """
    Subject and SAN fields of a certificate request.

    Attributes:
        common_name: Subject common name, always present in dns_names
        dns_names: DNS subject alternative names, in request order
        ip_addresses: IP subject alternative names; None marks a token that
            could not be parsed
        organization: Organization names, also used as organizational units
    """

    common_name: str
    dns_names: Tuple[str, ...] = ()
    ip_addresses: Tuple[Optional[IPAddress], ...] = ()
    organization: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.common_name:
            raise InputError("common name must not be empty")
        if self.common_name not in self.dns_names:
            raise InputError(
                f"common name {self.common_name!r} missing from DNS names"
            )

    @property
    def organizational_units(self) -> Tuple[str, ...]:
        return self.organization


def split_csv(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated option; an empty value has no entries."""
    if not value:
        return ()
    return tuple(value.split(","))


def parse_ip(token: str) -> Optional[IPAddress]:
    """
    Strictly parse a dotted IPv4 or colon IPv6 address.

    Returns None instead of raising when the token is not an address.
    """
    if "%" in token:
        # Scoped IPv6 addresses are not valid SANs
        return None
    try:
        return ipaddress.ip_address(token)
    except ValueError:
        return None


def build_request(
    common_name: str,
    alt_names: Optional[str] = "",
    ips: Optional[str] = "",
    org: Optional[str] = "",
) -> CertificateRequestSpec:
    """
    Build a certificate request from command-line values.

    Args:
        common_name: Subject common name (required)
        alt_names: Comma-separated DNS alternative names
        ips: Comma-separated IP alternative names
        org: Comma-separated organization names

    Returns:
        The request description

    Raises:
        InputError: If the common name is empty
    """
    if not common_name:
        raise InputError("a common name is required")

    # The common name is appended even when it is already listed
    dns_names = split_csv(alt_names) + (common_name,)

    ip_addresses = []
    for token in split_csv(ips):
        address = parse_ip(token)
        if address is None:
            logging.warning(f"Could not parse IP address {token!r}, sending zero address")
        ip_addresses.append(address)

    request = CertificateRequestSpec(
        common_name=common_name,
        dns_names=dns_names,
        ip_addresses=tuple(ip_addresses),
        organization=split_csv(org),
    )

    logging.debug(f"Built certificate request: {request!r}")
    return request
