"""
Vault PKI issuance client for certvault.

This module implements the client side of the two issuance operations of a
Vault PKI secrets engine:

- sign: submit an existing certificate signing request and get back a
  signed certificate (``/v1/<mount>/sign/<role>``)
- issue: have Vault generate a key pair and certificate in one round trip
  (``/v1/<mount>/issue/<role>``)

Key components:
- VaultTokenAuth: httpx authentication flow injecting the Vault token
- IssuanceResult: artifacts returned by the authority
- IssuanceClient: configuration holder exposing both operations
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Generator, List, Optional, Union

import httpx

from certvault.lib.certificate import csr_to_pem
from certvault.lib.config import IssuanceConfig
from certvault.lib.constants import API_PREFIX, TOKEN_HEADER, USER_AGENT, ZERO_IP
from certvault.lib.errors import MissingArtifactError, SigningError
from certvault.lib.logger import is_verbose, logging
from certvault.lib.request import CertificateRequestSpec
from certvault.lib.time import duration_to_str, format_ttl, to_duration

# =========================================================================
# Authentication
# =========================================================================


class VaultTokenAuth(httpx.Auth):
    """
    Attach the Vault token to every outgoing request.
    """

    def __init__(self, token: str):
        self._token = token

    def __repr__(self) -> str:
        return "VaultTokenAuth(token=<hidden>)"

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers[TOKEN_HEADER] = self._token
        yield request


# =========================================================================
# Results
# =========================================================================


@dataclass(frozen=True)
class IssuanceResult:
    """
    Artifacts returned by one issuance call.

    private_key is only set for certificates generated by the authority.
    """

    certificate: bytes
    private_key: Optional[bytes] = field(default=None, repr=False)
    issuing_ca: Optional[bytes] = None
    ca_chain: List[bytes] = field(default_factory=list)
    serial_number: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


# =========================================================================
# Client
# =========================================================================


class IssuanceClient:
    """
    Client for the Vault PKI sign and issue endpoints.

    The client only holds configuration; the HTTP session is created on first
    use and every operation is a single request/response exchange.
    """

    def __init__(
        self,
        config: IssuanceConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            config: Issuance configuration
            transport: Optional httpx transport to send requests through
        """
        self.config = config
        self.transport = transport
        self._session: Optional[httpx.Client] = None

    def __enter__(self) -> "IssuanceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def session_options(self) -> Dict[str, Any]:
        """
        Options the HTTP session is created with.

        TLS verification is only turned off by the ``insecure`` setting.
        """
        options: Dict[str, Any] = {
            "base_url": self.config.address,
            "auth": VaultTokenAuth(self.config.token),
            "headers": {"User-Agent": USER_AGENT},
            "verify": not self.config.insecure,
            # Standby nodes redirect to the active node with 307
            "follow_redirects": True,
        }
        if self.transport is not None:
            options["transport"] = self.transport
        return options

    @property
    def session(self) -> httpx.Client:
        if self._session is None:
            self._session = httpx.Client(**self.session_options())
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def endpoint(self, operation: str) -> str:
        return f"{API_PREFIX}/{self.config.mount_point}/{operation}/{self.config.role}"

    def resolve_ttl(self, ttl: Optional[Union[str, timedelta]] = None) -> timedelta:
        """
        Return the ttl to request: the caller's value, parsed, or the default.

        Raises:
            InvalidDuration: If a supplied ttl is malformed or negative
        """
        if ttl is None or ttl == "":
            return self.config.ttl
        return to_duration(ttl)

    # =====================================================================
    # Issuance operations
    # =====================================================================

    def sign_existing_request(
        self,
        csr: bytes,
        common_name: str,
        ttl: Optional[Union[str, timedelta]] = None,
    ) -> bytes:
        """
        Have the authority sign an externally supplied signing request.

        Args:
            csr: PEM or DER encoded signing request
            common_name: Common name to request
            ttl: Requested validity, defaults to the configured ttl

        Returns:
            The signed certificate

        Raises:
            InvalidDuration: If ttl is malformed (no request is sent)
            SigningError: If the request fails or is rejected
        """
        duration = self.resolve_ttl(ttl)

        payload = {
            "csr": csr_to_pem(csr),
            "common_name": common_name,
            "ttl": format_ttl(duration),
        }

        logging.info(
            f"Requesting signature for {common_name!r} from role {self.config.role!r} "
            f"({duration_to_str(duration)})"
        )
        data = self._post(self.endpoint("sign"), payload)

        return self._parse_result(data).certificate

    def generate_certificate(
        self,
        request: CertificateRequestSpec,
        ttl: Optional[Union[str, timedelta]] = None,
    ) -> IssuanceResult:
        """
        Have the authority generate a key pair and certificate for a request.

        Args:
            request: Subject and SAN fields of the certificate
            ttl: Requested validity, defaults to the configured ttl

        Returns:
            Certificate and private key

        Raises:
            InvalidDuration: If ttl is malformed (no request is sent)
            SigningError: If the request fails or is rejected
            MissingArtifactError: If no private key was returned
        """
        duration = self.resolve_ttl(ttl)

        payload: Dict[str, Any] = {
            "common_name": request.common_name,
            "alt_names": ",".join(request.dns_names),
            "ttl": format_ttl(duration),
        }
        if request.ip_addresses:
            payload["ip_sans"] = ",".join(
                ZERO_IP if address is None else str(address)
                for address in request.ip_addresses
            )
        if request.organization:
            payload["organization"] = ",".join(request.organization)
            payload["ou"] = ",".join(request.organizational_units)

        logging.info(
            f"Requesting certificate for {request.common_name!r} from role "
            f"{self.config.role!r} ({duration_to_str(duration)})"
        )
        data = self._post(self.endpoint("issue"), payload)

        result = self._parse_result(data)
        if not result.private_key:
            raise MissingArtifactError("authority did not return a private key")
        return result

    # =====================================================================
    # Response handling
    # =====================================================================

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send one request and return the decoded response body.

        Raises:
            SigningError: On transport failure or an error status
        """
        logging.debug(f"POST {self.config.address}{path}")
        try:
            res = self.session.post(path, json=payload)
        except httpx.HTTPError as e:
            raise SigningError(f"request to {self.config.address!r} failed: {e}") from e

        logging.debug(f"Got status code: {res.status_code!r}")

        if not res.is_success:
            errors = _response_errors(res)
            if res.status_code in (401, 403):
                message = "authentication rejected by authority"
            else:
                message = f"authority rejected request (HTTP {res.status_code})"
            if errors:
                message = f"{message}: {'; '.join(errors)}"
            if is_verbose():
                print(res.text)
            raise SigningError(
                message, rejected=True, status_code=res.status_code, errors=errors
            )

        try:
            body = res.json()
        except ValueError as e:
            raise SigningError(
                f"authority returned an invalid response: {e}",
                rejected=True,
                status_code=res.status_code,
            ) from e

        if not isinstance(body, dict):
            raise SigningError(
                "authority returned an invalid response",
                rejected=True,
                status_code=res.status_code,
            )

        for warning in body.get("warnings") or []:
            logging.warning(f"Authority: {warning}")

        return body

    def _parse_result(self, body: Dict[str, Any]) -> IssuanceResult:
        data = body.get("data") or {}
        certificate = data.get("certificate")
        if not certificate:
            raise MissingArtifactError("authority did not return a certificate")

        private_key = data.get("private_key")
        issuing_ca = data.get("issuing_ca")

        return IssuanceResult(
            certificate=certificate.encode(),
            private_key=private_key.encode() if private_key else None,
            issuing_ca=issuing_ca.encode() if issuing_ca else None,
            ca_chain=[entry.encode() for entry in data.get("ca_chain") or []],
            serial_number=data.get("serial_number"),
            warnings=list(body.get("warnings") or []),
        )


def _response_errors(res: httpx.Response) -> List[str]:
    """Extract the "errors" list of a Vault error response."""
    try:
        body = res.json()
    except ValueError:
        return [res.text.strip()] if res.text.strip() else []
    if isinstance(body, dict):
        return [str(error) for error in body.get("errors") or []]
    return []
