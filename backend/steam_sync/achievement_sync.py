"""Cross-reference a player's unlocked achievements with a client manifest."""

from __future__ import annotations

from time import perf_counter
from typing import Any, Dict, Iterable, List, Protocol

from pydantic import BaseModel, Field

from . import telemetry
from .identity import VanityResolver, resolve_steam_id64


class ClientManifestEntry(BaseModel):
    apiname: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)


class SyncResult(BaseModel):
    steamid64: str
    unlocked: List[str] = Field(default_factory=list)
    count: int = 0


class AchievementSource(VanityResolver, Protocol):
    async def get_player_achievements(self, steamid64: str) -> List[Dict[str, Any]]: ...


def build_key_lookup(manifest: Iterable[ClientManifestEntry]) -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for entry in manifest:
        lookup[entry.apiname] = entry.key
    return lookup


def is_achieved(value: Any) -> bool:
    try:
        return float(value) == 1
    except (TypeError, ValueError):
        return False


def select_unlocked_keys(achievements: Iterable[Any], lookup: Dict[str, str]) -> List[str]:
    unlocked: List[str] = []
    for record in achievements:
        if not isinstance(record, dict) or not is_achieved(record.get("achieved")):
            continue
        apiname = record.get("apiname")
        if not isinstance(apiname, str):
            continue
        key = lookup.get(apiname)
        if key:
            unlocked.append(key)
    return unlocked


async def sync_achievements(
    profile: str,
    client_manifest: List[ClientManifestEntry],
    api: AchievementSource,
) -> SyncResult:
    started = perf_counter()
    steamid64 = await resolve_steam_id64(profile, api)
    achievements = await api.get_player_achievements(steamid64)

    unlocked = select_unlocked_keys(achievements, build_key_lookup(client_manifest))

    result = SyncResult(steamid64=steamid64, unlocked=unlocked, count=len(unlocked))
    telemetry.sync_completed(
        steamid64=steamid64,
        achievements=len(achievements),
        unlocked=result.count,
        latency_ms=int((perf_counter() - started) * 1000),
    )
    return result


__all__ = [
    "ClientManifestEntry",
    "SyncResult",
    "build_key_lookup",
    "is_achieved",
    "select_unlocked_keys",
    "sync_achievements",
]
