"""Steam Web API calls used by the sync pipeline."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .config import Settings
from .errors import ResolutionError, StatsApiError
from .logging_config import redact_secrets

logger = logging.getLogger(__name__)

APP_ID = 1609230
STEAM_API_BASE = "https://api.steampowered.com"
RESOLVE_VANITY_URL = f"{STEAM_API_BASE}/ISteamUser/ResolveVanityURL/v0001/"
PLAYER_ACHIEVEMENTS_URL = f"{STEAM_API_BASE}/ISteamUserStats/GetPlayerAchievements/v1/"
BODY_PREVIEW_CHARS = 1200


def redact_key(text: str, api_key: Optional[str]) -> str:
    """Replace every occurrence of ``api_key`` (raw or URL-encoded) with ``REDACTED``."""
    return redact_secrets(text, [api_key])


class SteamWebApi:
    def __init__(self, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._api_key = settings.steam_api_key
        self._timeout = settings.http_timeout_seconds
        self._client = client

    def redact(self, text: str) -> str:
        return redact_key(text, self._api_key)

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Tuple[httpx.Response, Any]:
        query = {"key": self._api_key, **params}
        if self._client is not None:
            response = await self._send(self._client, url, query)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await self._send(client, url, query)
        try:
            data = response.json()
        except ValueError:
            data = None
        return response, data

    async def _send(self, client: httpx.AsyncClient, url: str, query: Dict[str, Any]) -> httpx.Response:
        request = client.build_request("GET", url, params=query)
        logger.info("Fetching %s", self.redact(str(request.url)))
        return await client.send(request)

    def _log_failed_body(self, label: str, response: httpx.Response) -> None:
        logger.warning("%s status: %s %s", label, response.status_code, response.reason_phrase)
        logger.warning("%s body: %s", label, self.redact(response.text[:BODY_PREVIEW_CHARS]))

    async def resolve_vanity(self, vanity: str) -> str:
        logger.info("Resolving vanity: %s", vanity)
        try:
            response, data = await self._get_json(RESOLVE_VANITY_URL, {"vanityurl": vanity})
        except httpx.HTTPError as exc:
            raise ResolutionError(f"ResolveVanityURL request failed: {self.redact(str(exc))}") from exc

        if not response.is_success:
            self._log_failed_body("ResolveVanityURL", response)
            raise ResolutionError(f"ResolveVanityURL failed (HTTP {response.status_code})")

        payload = data.get("response") if isinstance(data, dict) else None
        if not isinstance(payload, dict):
            payload = {}
        success = payload.get("success")
        steamid = payload.get("steamid")
        if isinstance(success, bool) or success != 1 or not steamid:
            raise ResolutionError(f"Could not resolve that Steam profile. (vanity={vanity})")
        return str(steamid)

    async def get_player_achievements(self, steamid64: str) -> List[Dict[str, Any]]:
        try:
            response, data = await self._get_json(
                PLAYER_ACHIEVEMENTS_URL,
                {"steamid": steamid64, "appid": str(APP_ID)},
            )
        except httpx.HTTPError as exc:
            raise StatsApiError(f"GetPlayerAchievements request failed: {self.redact(str(exc))}") from exc

        logger.info("GetPlayerAchievements status: %s %s", response.status_code, response.reason_phrase)
        if not response.is_success:
            self._log_failed_body("GetPlayerAchievements", response)
            raise StatsApiError(f"Steam API error (HTTP {response.status_code})")

        stats = data.get("playerstats") if isinstance(data, dict) else None
        if not isinstance(stats, dict):
            raise StatsApiError("Unexpected Steam response (missing playerstats).")
        if stats.get("error"):
            raise StatsApiError(self.redact(str(stats["error"])))

        # Steam omits the list for games without achievements; not an error.
        achievements = stats.get("achievements")
        if not isinstance(achievements, list):
            return []
        return achievements


__all__ = [
    "APP_ID",
    "PLAYER_ACHIEVEMENTS_URL",
    "RESOLVE_VANITY_URL",
    "SteamWebApi",
    "redact_key",
]
