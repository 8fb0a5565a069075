from __future__ import annotations

import logging
import sys

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

LOGGER_NAME = "shelter_service"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_otel_configured = False
_probe_filter_configured = False

_RESERVED_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class ExtraFieldsFormatter(logging.Formatter):
    """Appends the ``extra=`` fields of a record as sorted ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        rendered = super().format(record)
        extra_keys = sorted(
            key for key in vars(record) if key not in _RESERVED_RECORD_FIELDS and not key.startswith("_")
        )
        if not extra_keys:
            return rendered
        pairs = " ".join(f"{key}={getattr(record, key)}" for key in extra_keys)
        return f"{rendered} | {pairs}"


class ProbeAccessLogFilter(logging.Filter):
    """Drops successful health probe lines from ``uvicorn.access``.

    uvicorn formats access records with args
    ``(client_addr, method, path, http_version, status_code)``.
    """

    def __init__(self, probe_paths: tuple[str, ...]) -> None:
        super().__init__()
        self._probe_paths = frozenset(probe_paths)

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if not isinstance(args, tuple) or len(args) < 5:
            return True
        path, status = args[2], args[4]
        if not isinstance(path, str):
            return True
        path = path.split("?", 1)[0].rstrip("/") or "/"
        return not (path in self._probe_paths and str(status) == "200")


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ExtraFieldsFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger


def configure_otel(service_name: str) -> None:
    global _otel_configured
    if _otel_configured:
        return
    trace.set_tracer_provider(TracerProvider(resource=Resource.create({"service.name": service_name})))
    _otel_configured = True


def configure_probe_access_log_filter(probe_paths: tuple[str, ...] = ("/healthz", "/readyz")) -> None:
    global _probe_filter_configured
    if _probe_filter_configured:
        return
    logging.getLogger("uvicorn.access").addFilter(ProbeAccessLogFilter(probe_paths))
    _probe_filter_configured = True
