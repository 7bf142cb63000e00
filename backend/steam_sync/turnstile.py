"""Cloudflare Turnstile verification, enforced only in production."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import Settings
from .errors import ChallengeFailure, ConfigurationError

logger = logging.getLogger(__name__)

SITEVERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


@dataclass(frozen=True)
class ChallengeResult:
    success: bool
    error: Optional[str] = None
    details: Optional[Any] = None
    skipped: bool = False


class TurnstileVerifier:
    def __init__(self, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self.enforced = settings.is_production
        self._secret = settings.turnstile_secret_key
        self._timeout = settings.http_timeout_seconds
        self._client = client

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> ChallengeResult:
        if not self.enforced:
            return ChallengeResult(success=True, skipped=True)
        if not self._secret:
            raise ConfigurationError("Missing TURNSTILE_SECRET_KEY in production")
        if not token:
            return ChallengeResult(success=False, error="Missing turnstileToken")

        form = {"secret": self._secret, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            if self._client is not None:
                response = await self._client.post(SITEVERIFY_URL, data=form)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(SITEVERIFY_URL, data=form)
        except httpx.HTTPError as exc:
            logger.warning("Turnstile siteverify request failed: %s", exc)
            return ChallengeResult(success=False, error="Turnstile request failed", details=str(exc))

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict) or data.get("success") is not True:
            logger.info("Turnstile rejected token (status=%s)", response.status_code)
            return ChallengeResult(success=False, error="Turnstile failed", details=data)
        return ChallengeResult(success=True)

    async def require_human(self, token: str, remote_ip: Optional[str] = None) -> ChallengeResult:
        """Verify ``token`` and raise :class:`ChallengeFailure` unless it passed."""
        result = await self.verify(token, remote_ip)
        if not result.success:
            raise ChallengeFailure(result.error or "Turnstile failed", result.details)
        return result


__all__ = ["ChallengeResult", "SITEVERIFY_URL", "TurnstileVerifier"]
