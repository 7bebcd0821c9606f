"""SFTP delivery of encrypted settlement files."""
from __future__ import annotations

import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import paramiko

from settlement.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TransferResult:
    """Outcome reported by a transmitter."""

    success: bool
    message: str

    def to_dict(self) -> dict[str, str | bool]:
        return {"success": self.success, "message": self.message}


class Transmitter(Protocol):
    """Protocol describing delivery of a payload to a remote path."""

    def upload(self, remote_path: str, payload: bytes) -> TransferResult:
        """Upload ``payload`` and report whether the counterparty received it."""


class SftpTransmitter:
    """Uploads payloads over SFTP using paramiko."""

    def __init__(
        self,
        *,
        host: str,
        port: int = 22,
        username: str,
        password: str | None = None,
        key_filename: str | None = None,
        known_hosts_path: str | None = None,
        allow_unknown_hosts: bool = False,
        timeout_seconds: float = 30.0,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._key_filename = key_filename
        self._known_hosts_path = known_hosts_path
        self._allow_unknown_hosts = allow_unknown_hosts
        self._timeout = timeout_seconds
        self._client_factory = client_factory or paramiko.SSHClient

    @classmethod
    def from_settings(cls, settings: Settings, *, local: bool = False) -> "SftpTransmitter":
        return cls(
            host=settings.sftp_host,
            port=settings.sftp_port,
            username=settings.sftp_user,
            password=settings.sftp_password,
            key_filename=settings.sftp_private_key_path,
            known_hosts_path=settings.sftp_known_hosts_path,
            allow_unknown_hosts=local,
            timeout_seconds=settings.sftp_timeout_seconds,
        )

    def _connect(self, client: Any) -> None:
        if self._known_hosts_path:
            client.load_host_keys(self._known_hosts_path)
        else:
            client.load_system_host_keys()
        if self._allow_unknown_hosts:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        client.connect(
            self._host,
            port=self._port,
            username=self._username,
            password=self._password,
            key_filename=self._key_filename,
            timeout=self._timeout,
            allow_agent=False,
            look_for_keys=self._key_filename is None and self._password is None,
        )

    def upload(self, remote_path: str, payload: bytes) -> TransferResult:
        client = self._client_factory()
        try:
            self._connect(client)
            sftp = client.open_sftp()
            try:
                attributes = sftp.putfo(io.BytesIO(payload), remote_path, file_size=len(payload), confirm=True)
            finally:
                sftp.close()
        except (paramiko.SSHException, OSError) as exc:
            logger.warning(
                "sftp upload failed: %s", exc, extra={"host": self._host, "remote_path": remote_path}
            )
            return TransferResult(success=False, message=str(exc) or exc.__class__.__name__)
        finally:
            client.close()

        size = getattr(attributes, "st_size", len(payload))
        logger.info("sftp upload complete", extra={"host": self._host, "remote_path": remote_path, "size": size})
        return TransferResult(success=True, message=f"uploaded {size} bytes to {remote_path}")


__all__ = ["SftpTransmitter", "TransferResult", "Transmitter"]
