import logging
from typing import Dict

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, get_settings
from .errors import ConfigurationError
from .logging_config import configure_logging
from .sync_routes import router as steam_sync_router


logger = logging.getLogger(__name__)

try:
    settings_snapshot = get_settings()
except ConfigurationError:
    configure_logging()
    logger.error("Missing or invalid configuration; refusing to start.")
    raise

configure_logging(
    settings_snapshot.log_level,
    settings_snapshot.debug_http,
    secrets=[settings_snapshot.steam_api_key, settings_snapshot.turnstile_secret_key],
)
logger.info(
    "STEAM_API_KEY loaded: %s (length %s)",
    bool(settings_snapshot.steam_api_key),
    len(settings_snapshot.steam_api_key),
)
logger.info(
    "Turnstile enforced: %s",
    "YES (production)" if settings_snapshot.is_production else "NO (development)",
)

app = FastAPI(title="Steam Sync Relay", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings_snapshot.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(steam_sync_router)


@app.get("/healthz")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, str]:
    return {"status": "ok", "turnstile": "enforced" if settings.is_production else "skipped"}


def run() -> None:
    import uvicorn

    logger.info(
        "Steam sync server running on http://%s:%s",
        settings_snapshot.host,
        settings_snapshot.port,
    )
    uvicorn.run(app, host=settings_snapshot.host, port=settings_snapshot.port, log_config=None)


if __name__ == "__main__":
    run()
