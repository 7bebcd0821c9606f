from __future__ import annotations

import io
import sys
from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from botocore.exceptions import ClientError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from settlement.core.config import Settings
from settlement.models import Base
from settlement.services.transfer import TransferResult


class InMemoryS3Client:
    """Simple in-memory S3 stub used by the backup sink during tests."""

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, bytes]] = {}

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str | None = None,
        **_: object,
    ) -> dict[str, str]:
        bucket = self._buckets.setdefault(Bucket, {})
        bucket[Key] = Body.encode("utf-8") if isinstance(Body, str) else Body
        return {"ETag": "in-memory"}

    @property
    def buckets(self) -> dict[str, dict[str, bytes]]:
        return self._buckets


class DeniedS3Client:
    """S3 stub rejecting every write."""

    def put_object(self, **_: object) -> None:
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject")


class FakeGPG:
    """Stand-in for ``gnupg.GPG`` that tags plaintext instead of encrypting it."""

    instances: list["FakeGPG"] = []

    def __init__(self, gnupghome: str | None = None, gpgbinary: str = "gpg") -> None:
        self.gnupghome = gnupghome
        self.gpgbinary = gpgbinary
        self.encrypt_calls: list[dict[str, Any]] = []
        FakeGPG.instances.append(self)

    def import_keys(self, key_data: str) -> SimpleNamespace:
        fingerprints = ["0123456789ABCDEF"] if "PUBLIC KEY" in key_data else []
        return SimpleNamespace(fingerprints=fingerprints, count=len(fingerprints))

    def encrypt(self, data: bytes, recipients: list[str], **kwargs: Any) -> SimpleNamespace:
        self.encrypt_calls.append({"data": data, "recipients": recipients, **kwargs})
        return SimpleNamespace(ok=True, status="encryption ok", data=b"PGP:" + data)


class FakeSFTP:
    def __init__(self, files: dict[str, bytes], error: Exception | None = None) -> None:
        self._files = files
        self._error = error
        self.closed = False

    def putfo(self, fl: io.BytesIO, remotepath: str, file_size: int = 0, confirm: bool = True) -> SimpleNamespace:
        if self._error is not None:
            raise self._error
        data = fl.read()
        self._files[remotepath] = data
        return SimpleNamespace(st_size=len(data))

    def close(self) -> None:
        self.closed = True


class FakeSSHClient:
    """Stand-in for ``paramiko.SSHClient`` storing uploads in memory."""

    def __init__(self, *, connect_error: Exception | None = None, put_error: Exception | None = None) -> None:
        self.files: dict[str, bytes] = {}
        self.connect_kwargs: dict[str, Any] = {}
        self.host_key_policy: Any = None
        self.known_hosts: str | None = None
        self.closed = False
        self.sftp: FakeSFTP | None = None
        self._connect_error = connect_error
        self._put_error = put_error

    def load_host_keys(self, filename: str) -> None:
        self.known_hosts = filename

    def load_system_host_keys(self) -> None:
        return None

    def set_missing_host_key_policy(self, policy: Any) -> None:
        self.host_key_policy = policy

    def connect(self, hostname: str, **kwargs: Any) -> None:
        if self._connect_error is not None:
            raise self._connect_error
        self.connect_kwargs = {"hostname": hostname, **kwargs}

    def open_sftp(self) -> FakeSFTP:
        self.sftp = FakeSFTP(self.files, self._put_error)
        return self.sftp

    def close(self) -> None:
        self.closed = True


class RecordingBackupSink:
    def __init__(self, *, succeed: bool = True) -> None:
        self.succeed = succeed
        self.stored: dict[str, bytes] = {}

    def persist(self, key: str, data: bytes) -> bool:
        if self.succeed:
            self.stored[key] = data
        return self.succeed


class RecordingEncoder:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[bytes, str, str]] = []

    def encrypt(self, data: bytes, file_name: str, public_key: str) -> bytes:
        self.calls.append((data, file_name, public_key))
        if self.error is not None:
            raise self.error
        return b"ENC:" + data


class RecordingTransmitter:
    def __init__(self, result: TransferResult | None = None) -> None:
        self.result = result or TransferResult(success=True, message="ok")
        self.uploads: list[tuple[str, bytes]] = []

    def upload(self, remote_path: str, payload: bytes) -> TransferResult:
        self.uploads.append((remote_path, payload))
        return self.result


PUBLIC_KEY = "-----BEGIN PGP PUBLIC KEY BLOCK-----\n\nmQENBGTest\n-----END PGP PUBLIC KEY BLOCK-----\n"


engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        company_id="ACME",
        file_type_code="TDL",
        layout_version="1.0",
        primary_program_id="PRG001",
        secondary_program_id="PRG002",
        sftp_host="sftp.test",
        sftp_user="acme",
        pgp_public_key=PUBLIC_KEY,
        backup_bucket="test-backups",
        enable_tracing=False,
        enable_metrics=False,
    )


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def s3_client(monkeypatch: pytest.MonkeyPatch) -> InMemoryS3Client:
    client = InMemoryS3Client()

    def _client_factory(*args: object, **kwargs: object) -> InMemoryS3Client:
        return client

    monkeypatch.setattr("settlement.services.backup.boto3.client", _client_factory)
    return client


@pytest.fixture()
def fake_gpg(monkeypatch: pytest.MonkeyPatch) -> Iterator[type[FakeGPG]]:
    FakeGPG.instances = []
    monkeypatch.setattr("settlement.services.encryption.gnupg.GPG", FakeGPG)
    yield FakeGPG
    FakeGPG.instances = []


@pytest.fixture()
def ssh_client(monkeypatch: pytest.MonkeyPatch) -> FakeSSHClient:
    client = FakeSSHClient()
    monkeypatch.setattr("settlement.services.transfer.paramiko.SSHClient", lambda: client)
    return client
