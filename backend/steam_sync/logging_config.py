import logging
from logging.config import dictConfig
from typing import Iterable, Optional, Sequence, Tuple
from urllib.parse import quote, quote_plus

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
REDACTED = "REDACTED"

# httpx logs full request URLs (query string included) at INFO.
HTTP_CLIENT_LOGGERS: Tuple[str, ...] = ("httpx", "httpcore")


def redact_secrets(text: str, secrets: Iterable[Optional[str]]) -> str:
    """Replace every raw or URL-encoded occurrence of each secret with ``REDACTED``."""
    for secret in secrets:
        if not secret:
            continue
        for variant in {secret, quote(secret, safe=""), quote_plus(secret)}:
            text = text.replace(variant, REDACTED)
    return text


class SecretRedactingFilter(logging.Filter):
    def __init__(self, secrets: Sequence[Optional[str]] = ()) -> None:
        super().__init__()
        self.secrets = tuple(secret for secret in secrets if secret)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = redact_secrets(message, self.secrets)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def install_secret_redaction(
    secrets: Sequence[Optional[str]],
    logger_names: Iterable[str] = HTTP_CLIENT_LOGGERS,
) -> None:
    """Attach a single redacting filter to each named logger, replacing any earlier one."""
    for name in logger_names:
        target = logging.getLogger(name)
        for existing in [item for item in target.filters if isinstance(item, SecretRedactingFilter)]:
            target.removeFilter(existing)
        target.addFilter(SecretRedactingFilter(secrets))


def configure_logging(
    level: str = "INFO",
    debug_http: bool = False,
    secrets: Sequence[Optional[str]] = (),
) -> None:
    """Route all loggers through one stream handler that scrubs ``secrets``."""
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "redact_secrets": {
                    "()": SecretRedactingFilter,
                    "secrets": list(secrets),
                },
            },
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["redact_secrets"],
                },
            },
            "root": {
                "handlers": ["default"],
                "level": level.upper(),
            },
        }
    )

    install_secret_redaction(secrets)
    http_level = logging.DEBUG if debug_http else logging.WARNING
    for name in HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
    if debug_http:
        logging.getLogger("uvicorn.access").setLevel(logging.DEBUG)
