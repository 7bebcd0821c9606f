"""Best-effort audit copies of rendered settlement files."""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

import boto3

from settlement.core.config import Settings
from settlement.obs import BACKUP_FAILURE_COUNTER

logger = logging.getLogger(__name__)


class BackupSink(Protocol):
    """Protocol describing durable storage for rendered reports."""

    def persist(self, key: str, data: bytes) -> bool:
        """Store ``data`` under ``key``; return ``False`` when the copy was not kept."""


class S3BackupSink:
    """Writes rendered reports to S3; failures are logged and never raised."""

    def __init__(
        self,
        *,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url
        self._client_factory = client_factory or self._default_client_factory
        self._client: Any | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3BackupSink":
        return cls(
            bucket=settings.backup_bucket,
            region=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
        )

    def _default_client_factory(self) -> Any:
        return boto3.client("s3", region_name=self._region, endpoint_url=self._endpoint_url)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def persist(self, key: str, data: bytes) -> bool:
        try:
            client = self._get_client()
            client.put_object(Bucket=self._bucket, Key=key, Body=data, ContentType="text/plain")
        except Exception as exc:
            BACKUP_FAILURE_COUNTER.inc()
            logger.warning(
                "failed to persist settlement backup %s: %s",
                key,
                exc,
                extra={"bucket": self._bucket, "key": key},
            )
            return False
        logger.info("settlement backup stored", extra={"bucket": self._bucket, "key": key, "size": len(data)})
        return True


__all__ = ["BackupSink", "S3BackupSink"]
