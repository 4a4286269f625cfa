"""
Structured logging for the pipeline.

Every event logged while a run is executing carries the run's ``run_id``,
``user_id`` and current ``stage``; they live in context variables so that
concurrent runs on one event loop never see each other's values.
"""

import logging
import secrets
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

run_id_ctx: ContextVar[str | None] = ContextVar("run_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)
stage_ctx: ContextVar[str | None] = ContextVar("stage", default=None)

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "hpack")


def add_run_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor attaching the current run's identifiers."""
    for key, var in (("run_id", run_id_ctx), ("user_id", user_id_ctx), ("stage", stage_ctx)):
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def configure_logging(debug: bool = False) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        debug: Human-readable console output at DEBUG level; otherwise JSON at INFO
    """
    log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if debug else logging.WARNING)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_run_context,
        structlog.processors.TimeStamper(fmt="ISO", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def generate_run_id() -> str:
    """Millisecond timestamp in hex followed by six random hex digits.

    IDs sort by creation time, e.g. ``18f3a2b4c5d-9e0f1a``.
    """
    return f"{int(time.time() * 1000):x}-{secrets.token_hex(3)}"


@contextmanager
def run_context(run_id: str, user_id: str | None = None) -> Iterator[None]:
    """Bind run identifiers for the duration of a run; restores the previous values on exit."""
    tokens = [
        (run_id_ctx, run_id_ctx.set(run_id)),
        (user_id_ctx, user_id_ctx.set(user_id)),
        (stage_ctx, stage_ctx.set(None)),
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def set_stage(stage: str) -> None:
    """Record the stage the current run has entered."""
    stage_ctx.set(stage)
