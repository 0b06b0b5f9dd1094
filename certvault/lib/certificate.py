"""
Certificate handling utilities for certvault.

This module provides functions for:
- Normalizing externally supplied signing requests to PEM
- Loading issued certificates
- Logging a short description of an issued certificate
"""

from typing import List, Tuple

from asn1crypto import pem
from cryptography import x509
from cryptography.x509.oid import NameOID

from certvault.lib.errors import InputError
from certvault.lib.logger import logging

CSR_PEM_TYPE = "CERTIFICATE REQUEST"


# =========================================================================
# Format conversion functions
# =========================================================================


def is_pem(data: bytes) -> bool:
    """Check whether data is PEM armored."""
    return pem.detect(data)


def der_to_pem(der: bytes, pem_type: str) -> bytes:
    """
    Convert DER-encoded data to PEM format.

    Args:
        der: DER-encoded binary data
        pem_type: PEM header/footer type (e.g., "CERTIFICATE REQUEST")

    Returns:
        PEM-encoded data as bytes
    """
    return pem.armor(pem_type.upper(), der)


def csr_to_pem(csr: bytes) -> str:
    """
    Return a signing request as PEM text, armoring DER input.

    The request's contents are not inspected; the authority validates them.
    """
    if not is_pem(csr):
        logging.debug("Signing request is not PEM armored, treating it as DER")
        csr = der_to_pem(csr, CSR_PEM_TYPE)
    try:
        return csr.decode("ascii").strip()
    except UnicodeDecodeError as e:
        raise InputError(f"signing request is not valid PEM text: {e}") from e


def pem_to_cert(certificate: bytes) -> x509.Certificate:
    """Convert PEM-encoded certificate to object."""
    return x509.load_pem_x509_certificate(certificate)


# =========================================================================
# Certificate information
# =========================================================================


def get_subject_alternative_names(
    certificate: x509.Certificate,
) -> List[Tuple[str, str]]:
    """
    List the DNS and IP subject alternative names of a certificate.

    Returns:
        List of (type, value) tuples
    """
    try:
        san = certificate.extensions.get_extension_for_class(
            x509.SubjectAlternativeName
        )
    except x509.ExtensionNotFound:
        return []

    names: List[Tuple[str, str]] = []
    for dns_name in san.value.get_values_for_type(x509.DNSName):
        names.append(("DNS Host Name", dns_name))
    for ip_address in san.value.get_values_for_type(x509.IPAddress):
        names.append(("IP Address", str(ip_address)))
    return names


def print_certificate_information(certificate: bytes) -> None:
    """
    Log subject, serial number, expiry and SANs of an issued certificate.

    Args:
        certificate: PEM-encoded certificate as returned by the authority
    """
    try:
        cert = pem_to_cert(certificate)
    except ValueError as e:
        logging.debug(f"Could not parse issued certificate: {e}")
        return

    common_names = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if common_names:
        logging.info(f"Got certificate with subject {common_names[0].value!r}")
    else:
        logging.info(f"Got certificate with subject {cert.subject.rfc4514_string()!r}")

    logging.info(f"Certificate serial number: {cert.serial_number:x}")
    logging.info(f"Certificate expires: {cert.not_valid_after_utc.isoformat()}")

    for id_type, value in get_subject_alternative_names(cert):
        logging.debug(f"Certificate {id_type}: {value!r}")
