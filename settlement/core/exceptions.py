"""Settlement pipeline exception hierarchy."""
from __future__ import annotations


class SettlementError(RuntimeError):
    """Base class for settlement pipeline errors."""


class ConfigurationError(SettlementError):
    """Raised when a run is requested with an unusable configuration."""


class EncryptionError(SettlementError):
    """Raised when the rendered file cannot be encrypted."""


class DeliveryError(SettlementError):
    """Raised when the encrypted file could not be delivered."""


class LayoutError(SettlementError, ValueError):
    """Raised when a field value would corrupt the fixed record layout."""


class StageFailedError(SettlementError):
    """A pipeline stage failed."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"stage {stage} failed: {message}")


__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "EncryptionError",
    "LayoutError",
    "SettlementError",
    "StageFailedError",
]
