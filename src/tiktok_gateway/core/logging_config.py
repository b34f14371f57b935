"""Structured logging for the gateway, built on structlog.

``create_app()`` calls :func:`configure_logging` once with the values from
``Settings``.  Afterwards both logging front-ends end up in the same JSON
stream on stdout:

- ``logging.getLogger(__name__)`` — used by the client, normalizer and
  router.  Fields passed through ``extra={...}`` become top-level keys.
- ``structlog.get_logger(__name__)`` — used by the application factory and
  the request middleware, with keyword fields.

Every record carries ``timestamp``, ``level``, ``logger``, ``event`` and the
``service``/``version`` of the running gateway.  Records emitted while a
request is being served also carry its ``request_id``; the middleware in
``api/main.py`` sets :data:`request_id_var` and echoes the same id in the
``X-Request-ID`` response header.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
"""Id of the request currently being served, or ``None`` outside a request."""

REDACTED = "[REDACTED]"

_SECRET_MARKERS: tuple[str, ...] = (
    "api_key",
    "authorization",
    "cookie",
    "password",
    "secret",
    "token",
)
"""A key containing any of these (case-insensitive) has its value masked."""

_QUIET_LOGGERS: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore")
"""Chatty third-party loggers raised to WARNING outside DEBUG mode."""


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


def _is_secret(key: Any) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Mask secret-looking keys, including one level into dict values.

    The gateway itself handles no credentials, but upstream request headers
    may be logged while debugging and must never leak cookies or tokens.
    """
    for key, value in list(event_dict.items()):
        if _is_secret(key):
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                inner: REDACTED if _is_secret(inner) else inner_value
                for inner, inner_value in value.items()
            }
    return event_dict


def _inject_request_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    rid = request_id_var.get()
    if rid is not None:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _service_fields(service: str, version: str) -> Processor:
    """Return a processor stamping every record with the gateway identity."""

    def add_service(
        logger: WrappedLogger,  # noqa: ARG001
        method_name: str,  # noqa: ARG001
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("version", version)
        return event_dict

    return add_service


# ---------------------------------------------------------------------------
# Public configuration entry-point
# ---------------------------------------------------------------------------


def configure_logging(
    log_level: str = "INFO",
    service: str = "tiktok-gateway",
    version: str = "1.0.0",
) -> None:
    """Route stdlib and structlog records through one structlog formatter.

    ``DEBUG`` selects structlog's coloured console renderer; any other level
    renders newline-delimited JSON.  The root handler and the structlog
    chain are replaced on every call, so calling this again (as each test
    app does) never duplicates output, and loggers obtained earlier through
    ``structlog.get_logger()`` switch to the new ``service``/``version``.

    Args:
        log_level: Minimum level, case-insensitive.  Unknown names fall back
            to ``INFO``.
        service: Value of the ``service`` field on every record.
        version: Value of the ``version`` field on every record.
    """
    level_name = log_level.upper()
    debug = level_name == "DEBUG"

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _inject_request_id,
        _service_fields(service, version),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer: Processor = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            # stdlib records additionally get their ``extra=`` fields lifted.
            foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *pre_chain, _redact_secrets],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if debug else logging.WARNING)

    structlog.configure(
        processors=[
            *pre_chain,
            _redact_secrets,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level proxies must pick up the chain of the latest call.
        cache_logger_on_first_use=False,
    )
