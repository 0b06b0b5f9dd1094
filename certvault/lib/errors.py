"""
Error types and error reporting for certvault.

Every failure of an invocation is raised as one of the exceptions below and
travels up to the entry point, which logs it and exits with a non-zero status.
Each error names the stage of the run it belongs to so the final diagnostic
can tell the user where things went wrong.

Hierarchy:
    CertvaultError
    ├── ConfigurationError      missing VAULT_ADDR, unreadable token file
    ├── InputError              bad arguments, unreadable CSR file
    │   └── InvalidDuration     malformed or negative ttl
    ├── AuthorityError          anything the PKI authority did wrong
    │   ├── SigningError        transport failure or authority rejection
    │   └── MissingArtifactError
    └── PersistenceError        output files could not be written
"""

import traceback
from typing import List, Optional

from certvault.lib.logger import is_verbose, logging


class CertvaultError(Exception):
    """Base class for all errors raised by certvault."""

    stage = "unknown"

    def describe(self) -> str:
        return f"{self.stage} error: {self}"


class ConfigurationError(CertvaultError):
    stage = "configuration"


class InputError(CertvaultError):
    stage = "input"


class InvalidDuration(InputError):
    """A ttl string that is not a valid, non-negative duration."""

    def __init__(self, value: str, reason: str = "invalid duration"):
        self.value = value
        super().__init__(f"{reason}: {value!r}")


class AuthorityError(CertvaultError):
    stage = "authority"


class SigningError(AuthorityError):
    """
    Failure of an issuance call.

    The only distinction made is whether the request never got a proper answer
    (client-side I/O, ``rejected`` is False) or whether the authority answered
    and refused it (``rejected`` is True). Policy violations, malformed
    requests and authentication failures all land in the second bucket.

    Args:
        message: Human readable description
        rejected: True if the authority rejected the request
        status_code: HTTP status returned by the authority, if any
        errors: Error messages reported by the authority
    """

    def __init__(
        self,
        message: str,
        rejected: bool = False,
        status_code: Optional[int] = None,
        errors: Optional[List[str]] = None,
    ):
        self.rejected = rejected
        self.status_code = status_code
        self.errors = list(errors or [])
        super().__init__(message)


class MissingArtifactError(AuthorityError):
    """The authority answered successfully but left out an expected artifact."""


class PersistenceError(CertvaultError):
    stage = "persistence"


def handle_error(is_warning: bool = False) -> None:
    """
    Print the stacktrace of the current exception in verbose mode, otherwise
    hint at how to get one.
    """
    if is_verbose():
        traceback.print_exc()
    else:
        msg = "Use -debug to print a stacktrace"
        if is_warning:
            logging.warning(msg)
        else:
            logging.error(msg)
