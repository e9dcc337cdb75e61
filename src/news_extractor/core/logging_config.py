"""Process-wide logging setup for the extractor.

:func:`configure_logging` runs once per process: the Celery worker calls it
from ``worker_process_init`` and the CLI calls it from ``main()``.  Modules
log through ``logging.getLogger(__name__)`` with ``"extractor: ..."``
messages, or through ``structlog.get_logger(__name__)`` for key/value events
(the runner's ``extraction_*`` events).  Both end up on one stdout handler in
one format: JSON lines, or coloured console output at ``DEBUG``.

Records emitted while an invocation runs carry its ``invocation_id``; item
tasks spawned with ``asyncio.gather`` copy the context and inherit it.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

invocation_id_var: ContextVar[str | None] = ContextVar("invocation_id", default=None)
"""Set by :func:`~news_extractor.pipeline.runner.run_extraction` for its duration."""

_REDACTED = "[REDACTED]"

# Matched as lower-case substrings of event-dict keys.
_SECRET_MARKERS: tuple[str, ...] = (
    "api_key",
    "api_token",
    "authorization",
    "bearer",
    "database_url",
    "password",
    "secret",
    "token",
)

# Libraries that log every request/statement at INFO.
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "httpcore", "httpx", "sqlalchemy.engine")


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


def _is_secret(key: object) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Mask credential values, including one level into dict values (headers)."""
    for key, value in list(event_dict.items()):
        if _is_secret(key):
            event_dict[key] = _REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                inner: (_REDACTED if _is_secret(inner) else inner_value)
                for inner, inner_value in value.items()
            }
    return event_dict


def _add_invocation_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    invocation_id = invocation_id_var.get()
    if invocation_id is not None:
        event_dict.setdefault("invocation_id", invocation_id)
    return event_dict


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO") -> None:
    """Route stdlib and structlog records to stdout through one renderer.

    Every record gets ``timestamp``, ``level``, ``logger`` and ``event``, plus
    ``invocation_id`` inside an invocation.  Secrets are redacted before
    rendering.  Safe to call again: the root handler is replaced, not added.

    Args:
        log_level: ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` or ``CRITICAL``
            (any case).  Unknown names fall back to ``INFO``.
    """
    level_name = log_level.upper()
    debug = level_name == "DEBUG"

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_invocation_id,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer: Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if not debug:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
