"""In-process telemetry for sync outcomes.

Each outcome is written to the ``steam_sync.telemetry`` logger as one
``TELEMETRY {json}`` line and handed to registered listeners. Call sites use
:func:`sync_completed` and :func:`sync_failed`, which own the event names and
their fields; credential-named fields never leave this module unredacted.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, FrozenSet, List

from .errors import SteamSyncError

logger = logging.getLogger("steam_sync.telemetry")

SYNC_COMPLETED = "steam_sync_completed"
SYNC_FAILED = "steam_sync_failed"

REDACTED = "REDACTED"
_SENSITIVE_FIELDS: FrozenSet[str] = frozenset({"key", "api_key", "secret", "token", "turnstile_token"})


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]


Listener = Callable[[TelemetryEvent], None]

_listeners: List[Listener] = []
_lock = RLock()


def register_listener(listener: Listener) -> None:
    """Subscribe ``listener`` to every event emitted in this process."""
    with _lock:
        _listeners.append(listener)


def clear_listeners() -> None:
    with _lock:
        _listeners.clear()


def sync_completed(*, steamid64: str, achievements: int, unlocked: int, latency_ms: int) -> None:
    emit_event(
        SYNC_COMPLETED,
        steamid64=steamid64,
        achievements=achievements,
        count=unlocked,
        latency_ms=latency_ms,
    )


def sync_failed(exc: BaseException) -> None:
    """Record a failed sync.

    Only :class:`SteamSyncError` messages are recorded; they are already
    scrubbed of credentials. Anything else is reported by type alone.
    """
    fields: Dict[str, Any] = {"error_type": type(exc).__name__}
    if isinstance(exc, SteamSyncError):
        fields["error"] = str(exc)
    emit_event(SYNC_FAILED, **fields)


def emit_event(name: str, **fields: Any) -> None:
    payload = {key: REDACTED if key.lower() in _SENSITIVE_FIELDS else value for key, value in fields.items()}
    event = TelemetryEvent(name=name, payload=payload)

    with _lock:
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    logger.info("TELEMETRY %s", json.dumps({"event": name, **payload}, default=str))


__all__ = [
    "SYNC_COMPLETED",
    "SYNC_FAILED",
    "TelemetryEvent",
    "clear_listeners",
    "emit_event",
    "register_listener",
    "sync_completed",
    "sync_failed",
]
