import pytest

from certvault import entry
from certvault.commands import issue
from certvault.lib import config as config_module
from certvault.lib.vault import IssuanceClient

from conftest import VAULT_ADDR


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def clients(monkeypatch, fake_vault):
    """Route every client created by the command through the fake Vault."""
    created = []

    def factory(config):
        client = IssuanceClient(config, transport=fake_vault.transport)
        created.append(client)
        return client

    monkeypatch.setattr(issue, "IssuanceClient", factory)
    return created


def test_generate_mode(vault_home, workdir, fake_vault, clients, certificate_pem):
    fake_vault.body = {
        "data": {"certificate": certificate_pem.decode(), "private_key": "KEY"}
    }
    (workdir / "example.com.crt").write_bytes(b"stale content that is longer")

    entry.main(["-alt", "www.example.com", "-ttl", "24h", "example.com"])

    assert (workdir / "example.com.crt").read_bytes() == certificate_pem
    assert (workdir / "example.com.key").read_bytes() == b"KEY"
    assert str(fake_vault.requests[0].url) == f"{VAULT_ADDR}/v1/pki/issue/pki"
    assert fake_vault.payload()["alt_names"] == "www.example.com,example.com"
    assert fake_vault.payload()["ttl"] == "86400s"


def test_sign_mode(vault_home, workdir, fake_vault, clients):
    csr = workdir / "server.csr"
    csr.write_bytes(
        b"-----BEGIN CERTIFICATE REQUEST-----\nMIIBAA==\n-----END CERTIFICATE REQUEST-----\n"
    )
    fake_vault.body = {"data": {"certificate": "CERT"}}

    entry.main(["-csr", str(csr), "-profile", "web", "server.example.com", "server"])

    assert (workdir / "server.crt").read_bytes() == b"CERT"
    assert not (workdir / "server.key").exists()
    assert len(fake_vault.requests) == 1
    assert str(fake_vault.requests[0].url) == f"{VAULT_ADDR}/v1/pki/sign/web"
    assert fake_vault.payload()["common_name"] == "server.example.com"


def test_profile_from_environment(vault_home, workdir, fake_vault, clients, monkeypatch):
    monkeypatch.setenv("VAULT_PKI_PROFILE", "env-role")
    fake_vault.body = {"data": {"certificate": "CERT", "private_key": "KEY"}}

    entry.main(["example.com"])

    assert str(fake_vault.requests[0].url) == f"{VAULT_ADDR}/v1/pki/issue/env-role"


def test_insecure_flag(vault_home, workdir, fake_vault, clients):
    fake_vault.body = {"data": {"certificate": "CERT", "private_key": "KEY"}}

    entry.main(["-k", "example.com"])
    assert clients[0].session_options()["verify"] is False

    entry.main(["example.com"])
    assert clients[1].session_options()["verify"] is True


def test_missing_vault_addr(vault_home, workdir, fake_vault, clients, monkeypatch):
    monkeypatch.delenv("VAULT_ADDR")
    token_reads = []
    monkeypatch.setattr(config_module, "read_token", token_reads.append)

    with pytest.raises(SystemExit) as excinfo:
        entry.main(["example.com"])

    assert excinfo.value.code == 1
    assert token_reads == []
    assert clients == []
    assert fake_vault.requests == []
    assert list(workdir.iterdir()) == []


def test_authority_error_writes_nothing(vault_home, workdir, fake_vault, clients, capsys):
    fake_vault.status_code = 400
    fake_vault.body = {"errors": ["unknown role"]}

    with pytest.raises(SystemExit) as excinfo:
        entry.main(["example.com"])

    assert excinfo.value.code == 1
    assert list(workdir.iterdir()) == []
    assert "authority error" in capsys.readouterr().out


def test_invalid_ttl(vault_home, workdir, fake_vault, clients):
    with pytest.raises(SystemExit) as excinfo:
        entry.main(["-ttl", "abc", "example.com"])

    assert excinfo.value.code == 1
    assert fake_vault.requests == []


def test_unreadable_csr(vault_home, workdir, fake_vault, clients, capsys):
    with pytest.raises(SystemExit) as excinfo:
        entry.main(["-csr", str(workdir / "missing.csr"), "example.com"])

    assert excinfo.value.code == 1
    assert fake_vault.requests == []
    assert "input error" in capsys.readouterr().out


def test_no_arguments_prints_usage(capsys):
    with pytest.raises(SystemExit) as excinfo:
        entry.main([])

    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_missing_common_name():
    with pytest.raises(SystemExit) as excinfo:
        entry.main(["-ttl", "24h"])

    assert excinfo.value.code != 0


def test_version_returns():
    assert entry.main(["--version"]) is None


def test_explicit_empty_profile_overrides_environment(
    vault_home, workdir, fake_vault, clients, monkeypatch
):
    monkeypatch.setenv("VAULT_PKI_PROFILE", "env-role")
    fake_vault.body = {"data": {"certificate": "CERT", "private_key": "KEY"}}

    entry.main(["-profile", "", "example.com"])

    assert str(fake_vault.requests[0].url) == f"{VAULT_ADDR}/v1/pki/issue/pki"


def test_token_not_ascii_reports_configuration_stage(
    vault_home, workdir, fake_vault, clients, capsys
):
    (vault_home / ".vault-token").write_bytes(b"\xff\xfe token")

    with pytest.raises(SystemExit) as excinfo:
        entry.main(["example.com"])

    assert excinfo.value.code == 1
    assert fake_vault.requests == []
    assert "configuration error" in capsys.readouterr().out


def test_debug_flag_enables_debug_output(vault_home, workdir, fake_vault, clients, capsys):
    fake_vault.body = {"data": {"certificate": "CERT", "private_key": "KEY"}}

    entry.main(["-debug", "example.com"])

    assert "[+] " in capsys.readouterr().out
