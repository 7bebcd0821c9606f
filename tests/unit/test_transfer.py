from __future__ import annotations

import logging

import paramiko
import pytest

from settlement.services.transfer import SftpTransmitter, TransferResult
from tests.conftest import FakeSSHClient


def test_transmitter_uploads_payload(ssh_client: FakeSSHClient) -> None:
    transmitter = SftpTransmitter(
        host="sftp.test",
        port=2222,
        username="acme",
        password="secret",
        known_hosts_path="/etc/settlement/known_hosts",
    )

    result = transmitter.upload("/users/acme/incoming/file.txt.pgp", b"ciphertext")

    assert result == TransferResult(success=True, message="uploaded 10 bytes to /users/acme/incoming/file.txt.pgp")
    assert ssh_client.files == {"/users/acme/incoming/file.txt.pgp": b"ciphertext"}
    assert ssh_client.connect_kwargs["hostname"] == "sftp.test"
    assert ssh_client.connect_kwargs["port"] == 2222
    assert ssh_client.connect_kwargs["username"] == "acme"
    assert ssh_client.known_hosts == "/etc/settlement/known_hosts"
    assert isinstance(ssh_client.host_key_policy, paramiko.RejectPolicy)
    assert ssh_client.sftp is not None and ssh_client.sftp.closed
    assert ssh_client.closed


def test_local_transmitter_accepts_unknown_host_keys(ssh_client: FakeSSHClient) -> None:
    transmitter = SftpTransmitter(host="localhost", username="acme", allow_unknown_hosts=True)

    transmitter.upload("/users/acme/incoming/x.pgp", b"x")

    assert isinstance(ssh_client.host_key_policy, paramiko.AutoAddPolicy)


def test_transmitter_reports_connection_failure() -> None:
    client = FakeSSHClient(connect_error=paramiko.AuthenticationException("Authentication failed."))
    transmitter = SftpTransmitter(host="sftp.test", username="acme", client_factory=lambda: client)

    result = transmitter.upload("/users/acme/incoming/x.pgp", b"x")

    assert result.success is False
    assert result.message == "Authentication failed."
    assert client.closed


def test_transmitter_reports_upload_failure() -> None:
    client = FakeSSHClient(put_error=OSError("disk full"))
    transmitter = SftpTransmitter(host="sftp.test", username="acme", client_factory=lambda: client)

    result = transmitter.upload("/users/acme/incoming/x.pgp", b"x")

    assert result.to_dict() == {"success": False, "message": "disk full"}
    assert client.sftp is not None and client.sftp.closed
    assert client.closed


def test_transmitter_failure_is_not_logged_as_error(caplog: pytest.LogCaptureFixture) -> None:
    client = FakeSSHClient(put_error=OSError("disk full"))
    transmitter = SftpTransmitter(host="sftp.test", username="acme", client_factory=lambda: client)

    with caplog.at_level(logging.DEBUG, logger="settlement.services.transfer"):
        transmitter.upload("/users/acme/incoming/x.pgp", b"x")

    assert [record.levelno for record in caplog.records] == [logging.WARNING]
    assert "disk full" in caplog.records[0].getMessage()
