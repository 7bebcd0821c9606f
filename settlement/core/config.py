"""Configuration management for the settlement report pipeline."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def _load_default_public_key() -> str:
    default_path = Path(__file__).resolve().parent / "../.." / "configs" / "counterparty-public.asc"
    if default_path.exists():
        return default_path.read_text(encoding="utf-8")
    return ""


class Settings(BaseSettings):
    """Settings for the settlement report worker, read from the environment or `.env`."""

    database_url: str = Field(default="postgresql+psycopg://settlement:settlement@db:5432/settlement")

    aws_region: str = Field(default="us-east-1")
    s3_endpoint_url: str | None = Field(default=None)
    backup_bucket: str = Field(default="settlement-reports")
    backup_prefix: str = Field(default="Settlement/TransactionalDataLayout/Backup")

    sftp_host: str = Field(default="sftp.counterparty.example")
    sftp_port: int = Field(default=22)
    sftp_user: str = Field(default="settlement")
    sftp_password: str | None = Field(default=None)
    sftp_private_key_path: str | None = Field(default=None)
    sftp_known_hosts_path: str | None = Field(default=None)
    sftp_timeout_seconds: float = Field(default=30.0)

    pgp_public_key: str = Field(default_factory=_load_default_public_key)
    gnupg_home: str | None = Field(default=None)
    gnupg_binary: str = Field(default="gpg")

    company_id: str = Field(default="COMPANY01")
    file_type_code: str = Field(default="TDL")
    layout_version: str = Field(default="1.0")
    field_delimiter: str = Field(default="|")
    record_terminator: str = Field(default="\r\n")
    primary_program_id: str = Field(default="")
    secondary_program_id: str = Field(default="")

    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=True)
    otel_exporter_endpoint: str | None = Field(default=None)
    metrics_pushgateway_url: str | None = Field(default=None)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
