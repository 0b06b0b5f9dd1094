"""
File handling utilities for certvault.

Issued artifacts are written with one of two policies:

- sign mode: ``<prefix>.crt`` is created if missing and appended to,
  never truncated, so a pre-seeded certificate file keeps its content
- generate mode: ``<prefix>.crt`` and ``<prefix>.key`` are both truncated
  and rewritten once both are open; the key file is owner-only
"""

import os
from typing import Tuple

from certvault.lib.constants import (
    CERTIFICATE_FILE_MODE,
    CERTIFICATE_SUFFIX,
    PRIVATE_KEY_FILE_MODE,
    PRIVATE_KEY_SUFFIX,
)
from certvault.lib.errors import PersistenceError
from certvault.lib.logger import logging

# Open flags of the two write policies
SIGN_MODE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_APPEND
GENERATE_MODE_FLAGS = os.O_WRONLY | os.O_CREAT


def certificate_path(prefix: str) -> str:
    return f"{prefix}{CERTIFICATE_SUFFIX}"


def private_key_path(prefix: str) -> str:
    return f"{prefix}{PRIVATE_KEY_SUFFIX}"


def _open(path: str, flags: int, mode: int) -> int:
    try:
        return os.open(path, flags, mode)
    except OSError as e:
        raise PersistenceError(f"could not open {path!r}: {e}") from e


def _truncate(fd: int, path: str) -> None:
    try:
        os.ftruncate(fd, 0)
    except OSError as e:
        raise PersistenceError(f"could not truncate {path!r}: {e}") from e


def _write(fd: int, data: bytes, path: str) -> None:
    try:
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
    except OSError as e:
        raise PersistenceError(f"could not write {path!r}: {e}") from e


def save_signed_certificate(certificate: bytes, prefix: str) -> str:
    """
    Write a certificate returned for an external signing request.

    The file is opened without truncation.

    Args:
        certificate: Certificate bytes
        prefix: Output file prefix

    Returns:
        Path of the certificate file

    Raises:
        PersistenceError: If the file cannot be opened or written
    """
    path = certificate_path(prefix)
    logging.debug(f"Appending certificate to {path!r}")

    fd = _open(path, SIGN_MODE_FLAGS, CERTIFICATE_FILE_MODE)
    try:
        _write(fd, certificate, path)
    finally:
        os.close(fd)

    return path


def save_certificate_pair(
    certificate: bytes, private_key: bytes, prefix: str
) -> Tuple[str, str]:
    """
    Write a generated certificate and its private key.

    Both files are opened before either is truncated, so a failure to open
    the key file leaves an existing certificate untouched. The key file is
    restricted to the owner even if it already existed.

    Args:
        certificate: Certificate bytes
        private_key: Private key bytes
        prefix: Output file prefix

    Returns:
        Tuple of (certificate path, private key path)

    Raises:
        PersistenceError: If a file cannot be opened or written
    """
    cert_path = certificate_path(prefix)
    key_path = private_key_path(prefix)

    cert_existed = os.path.exists(cert_path)
    cert_fd = _open(cert_path, GENERATE_MODE_FLAGS, CERTIFICATE_FILE_MODE)
    try:
        try:
            key_fd = _open(key_path, GENERATE_MODE_FLAGS, PRIVATE_KEY_FILE_MODE)
        except PersistenceError:
            if not cert_existed:
                os.unlink(cert_path)
            raise
        try:
            try:
                os.fchmod(key_fd, PRIVATE_KEY_FILE_MODE)
            except OSError as e:
                raise PersistenceError(
                    f"could not restrict permissions of {key_path!r}: {e}"
                ) from e

            # Nothing is truncated until both files are open
            _truncate(cert_fd, cert_path)
            _truncate(key_fd, key_path)

            _write(cert_fd, certificate, cert_path)
            logging.debug(f"Certificate written to {cert_path!r}")

            _write(key_fd, private_key, key_path)
            logging.debug(f"Private key written to {key_path!r}")
        finally:
            os.close(key_fd)
    finally:
        os.close(cert_fd)

    return cert_path, key_path
