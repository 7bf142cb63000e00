"""Error types raised across the sync pipeline."""

from __future__ import annotations

from typing import Any, Optional


class SteamSyncError(RuntimeError):
    """Base class for failures surfaced to API callers."""


class ConfigurationError(SteamSyncError):
    """Raised when a required credential or secret is missing."""


class ValidationError(SteamSyncError):
    """Raised when a request is missing a required field."""


class PayloadTooLarge(SteamSyncError):
    """Raised when a request body exceeds the configured size limit."""


class ChallengeFailure(SteamSyncError):
    """Raised when the Turnstile challenge was not passed."""

    def __init__(self, reason: str, details: Optional[Any] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.details = details


class ResolutionError(SteamSyncError):
    """Raised when a profile reference cannot be turned into a SteamID64."""


class StatsApiError(SteamSyncError):
    """Raised when the Steam stats call fails or reports an error."""


__all__ = [
    "ChallengeFailure",
    "ConfigurationError",
    "PayloadTooLarge",
    "ResolutionError",
    "StatsApiError",
    "SteamSyncError",
    "ValidationError",
]
