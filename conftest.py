import datetime
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from certvault.lib.config import IssuanceConfig

VAULT_ADDR = "https://vault.test:8200"
TOKEN = "s.test-token"


class FakeVault:
    """
    In-memory stand-in for the Vault PKI endpoints.

    Records every request and answers with the configured status and body.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {}
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def payload(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


def make_certificate_pem(common_name: str = "example.com") -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False
        )
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


@pytest.fixture
def fake_vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def config() -> IssuanceConfig:
    return IssuanceConfig(address=VAULT_ADDR, token=TOKEN)


@pytest.fixture
def certificate_pem() -> bytes:
    return make_certificate_pem()


@pytest.fixture
def vault_home(tmp_path, monkeypatch):
    """Home directory holding a Vault token, with VAULT_ADDR set."""
    home = tmp_path / "home"
    home.mkdir()
    (home / ".vault-token").write_text(TOKEN + "\n")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("VAULT_ADDR", VAULT_ADDR)
    monkeypatch.delenv("VAULT_PKI_PROFILE", raising=False)
    return home
