"""PGP encryption of rendered settlement files."""
from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import gnupg

from settlement.core.config import Settings
from settlement.core.exceptions import EncryptionError

logger = logging.getLogger(__name__)


class SecureEncoder(Protocol):
    """Protocol describing the encryption step applied before delivery."""

    def encrypt(self, data: bytes, file_name: str, public_key: str) -> bytes:
        """Return ``data`` encrypted for the holder of ``public_key``."""


class GnuPGEncoder:
    """Encrypts payloads with GnuPG for the counterparty's public key.

    With ``ephemeral=True`` every call imports the key into a throwaway keyring,
    which is how local runs avoid touching the operator's own GnuPG home.
    """

    def __init__(
        self,
        *,
        gnupg_home: str | None = None,
        gpg_binary: str = "gpg",
        ephemeral: bool = False,
        gpg_factory: Callable[..., Any] | None = None,
    ) -> None:
        self._gnupg_home = gnupg_home
        self._gpg_binary = gpg_binary
        self._ephemeral = ephemeral
        self._gpg_factory = gpg_factory or gnupg.GPG

    @classmethod
    def from_settings(cls, settings: Settings, *, local: bool = False) -> "GnuPGEncoder":
        return cls(gnupg_home=settings.gnupg_home, gpg_binary=settings.gnupg_binary, ephemeral=local)

    @contextmanager
    def _gpg(self) -> Iterator[Any]:
        if self._ephemeral:
            with tempfile.TemporaryDirectory(prefix="settlement-gnupg-") as home:
                yield self._gpg_factory(gnupghome=home, gpgbinary=self._gpg_binary)
        else:
            yield self._gpg_factory(gnupghome=self._gnupg_home, gpgbinary=self._gpg_binary)

    def encrypt(self, data: bytes, file_name: str, public_key: str) -> bytes:
        if not public_key or not public_key.strip():
            raise EncryptionError("no counterparty public key configured")

        try:
            with self._gpg() as gpg:
                imported = gpg.import_keys(public_key)
                recipients = list(imported.fingerprints or [])
                if not recipients:
                    raise EncryptionError("counterparty public key could not be imported")
                result = gpg.encrypt(
                    data,
                    recipients,
                    always_trust=True,
                    armor=False,
                    extra_args=["--set-filename", file_name],
                )
        except EncryptionError:
            raise
        except (OSError, ValueError) as exc:
            raise EncryptionError(f"gpg invocation failed: {exc}") from exc

        if not result.ok:
            raise EncryptionError(f"gpg encryption failed: {result.status}")
        logger.info("settlement file encrypted", extra={"file_name": file_name, "recipients": len(recipients)})
        return bytes(result.data)


__all__ = ["GnuPGEncoder", "SecureEncoder"]
