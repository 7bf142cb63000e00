"""Turn free-form Steam profile references into SteamID64 values.

Accepted inputs, checked in order:

* a bare 17 digit SteamID64,
* a ``steamcommunity.com/profiles/<steamid64>`` URL,
* a ``steamcommunity.com/id/<vanity>`` URL,
* anything else, which is treated as a vanity name.

Only the last two need a network round trip.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal, Protocol

STEAM_ID64_PATTERN = re.compile(r"[0-9]{17}")
PROFILES_URL_PATTERN = re.compile(r"steamcommunity\.com/profiles/([0-9]{17})", re.IGNORECASE)
VANITY_URL_PATTERN = re.compile(r"steamcommunity\.com/id/([^/?#]+)", re.IGNORECASE)

ReferenceKind = Literal["steamid64", "vanity"]


class VanityResolver(Protocol):
    async def resolve_vanity(self, vanity: str) -> str: ...


@dataclass(frozen=True)
class ProfileReference:
    kind: ReferenceKind
    value: str


def clean_profile(profile: Any) -> str:
    return str(profile or "").strip()


def is_steam_id64(value: str) -> bool:
    return bool(STEAM_ID64_PATTERN.fullmatch(value))


def parse_profile_reference(profile: Any) -> ProfileReference:
    cleaned = clean_profile(profile)
    if is_steam_id64(cleaned):
        return ProfileReference(kind="steamid64", value=cleaned)

    profiles_match = PROFILES_URL_PATTERN.search(cleaned)
    if profiles_match:
        return ProfileReference(kind="steamid64", value=profiles_match.group(1))

    vanity_match = VANITY_URL_PATTERN.search(cleaned)
    if vanity_match:
        return ProfileReference(kind="vanity", value=vanity_match.group(1))

    return ProfileReference(kind="vanity", value=cleaned)


async def resolve_steam_id64(profile: Any, api: VanityResolver) -> str:
    reference = parse_profile_reference(profile)
    if reference.kind == "steamid64":
        return reference.value
    return await api.resolve_vanity(reference.value)


__all__ = [
    "ProfileReference",
    "clean_profile",
    "is_steam_id64",
    "parse_profile_reference",
    "resolve_steam_id64",
]
