"""structlog setup for mailsync.

The coordinator tags each optimistic mutation with a fresh ``mutation_id``.
It lives in a context variable, so the apply, request, confirm and
compensate entries of one call share the id even when several mutations are
in flight on the same event loop.

Usage:
    from mailsync.core.logging import configure_logging, get_logger

    configure_logging("DEBUG", json_output=False)
    logger = get_logger(__name__)
    logger.info("mutation_confirmed", email_id=short_id(email_id))
"""

import logging
import sys
from contextvars import ContextVar, Token
from typing import Any

import structlog

_mutation_id: ContextVar[str | None] = ContextVar("mutation_id", default=None)


def set_correlation_id(mutation_id: str | None) -> Token[str | None]:
    """Bind ``mutation_id`` to the current task.

    Returns the token that reset_correlation_id() needs to put the previous
    value back once the mutation has settled.
    """
    return _mutation_id.set(mutation_id)


def reset_correlation_id(token: Token[str | None]) -> None:
    _mutation_id.reset(token)


def get_correlation_id() -> str | None:
    return _mutation_id.get()


def add_correlation_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor: copy the active mutation_id, if any, into the entry."""
    mutation_id = _mutation_id.get()
    if mutation_id is not None:
        event_dict["mutation_id"] = mutation_id
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Route structlog through stdlib logging on stdout.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR
        json_output: JSON lines for log collectors; False renders coloured
            key=value lines for the CLI
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_correlation_id,
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def short_id(value: str | None, length: int = 12) -> str:
    """Shorten an opaque mail or thread id for log output.

    Graph-style ids run past a hundred characters; the prefix is enough to
    tell entries apart.
    """
    if not value:
        return ""
    if len(value) <= length:
        return value
    return value[:length] + "..."
