"""REST endpoint the game client calls to sync Steam achievements."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, List, Optional

import httpx
from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import JSONResponse

from . import telemetry
from .achievement_sync import ClientManifestEntry, sync_achievements
from .config import Settings, get_settings
from .errors import ChallengeFailure, PayloadTooLarge, SteamSyncError, ValidationError
from .steam_api import SteamWebApi
from .turnstile import TurnstileVerifier

router = APIRouter(prefix="/api/steam-sync", tags=["steam-sync"])
logger = logging.getLogger(__name__)

MISSING_PROFILE = "Missing profile"
HTTP_413_CONTENT_TOO_LARGE = 413


class SteamSyncRequest(BaseModel):
    profile: str = Field(..., min_length=1)
    client: List[ClientManifestEntry] = Field(default=None, validate_default=True)
    turnstile_token: str = Field("", alias="turnstileToken")

    @field_validator("profile", "turnstile_token", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("client", mode="before")
    @classmethod
    def _keep_complete_rows(cls, value: Any) -> List[ClientManifestEntry]:
        logger.info("Client manifest entries received: %s", len(value) if isinstance(value, list) else "not array")
        if not isinstance(value, list):
            return []
        entries: List[ClientManifestEntry] = []
        for row in value:
            try:
                entries.append(ClientManifestEntry.model_validate(row))
            except PydanticValidationError:
                continue
        return entries


def parse_sync_request(body: bytes) -> SteamSyncRequest:
    """Validate a raw request body; anything without a usable profile is rejected."""
    try:
        return SteamSyncRequest.model_validate_json(body or b"{}")
    except PydanticValidationError as exc:
        raise ValidationError(MISSING_PROFILE) from exc


async def read_limited_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge("Request body too large")

    chunks: List[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLarge("Request body too large")
        chunks.append(chunk)
    return b"".join(chunks)


def _error_response(status_code: int, message: str, details: Optional[Any] = None) -> JSONResponse:
    content = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


@router.post("")
async def steam_sync(
    request: Request,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> JSONResponse:
    try:
        body = await read_limited_body(request, settings.max_body_bytes)
        sync_request = parse_sync_request(body)
        remote_ip = request.client.host if request.client else None
        verifier = TurnstileVerifier(settings, client=http_client)
        await verifier.require_human(sync_request.turnstile_token, remote_ip)
        result = await sync_achievements(
            sync_request.profile,
            sync_request.client,
            SteamWebApi(settings, client=http_client),
        )
    except PayloadTooLarge as exc:
        return _error_response(HTTP_413_CONTENT_TOO_LARGE, str(exc))
    except ValidationError as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    except ChallengeFailure as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.reason, exc.details)
    except SteamSyncError as exc:
        logger.error("POST /api/steam-sync error: %s", exc)
        telemetry.sync_failed(exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("POST /api/steam-sync failed unexpectedly")
        telemetry.sync_failed(exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")

    return JSONResponse(result.model_dump())


@router.get("")
async def steam_sync_wrong_method() -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_PROFILE)


__all__ = ["SteamSyncRequest", "get_http_client", "parse_sync_request", "read_limited_body", "router"]
