"""Structured logging configuration using structlog."""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from deploystack.core.config import Settings, get_settings


class AppContext:
    """Processor stamping every entry with the app name and environment."""

    def __init__(self, settings: Settings) -> None:
        self.app = settings.app_name
        self.env = settings.app_env

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["app"] = self.app
        event_dict["env"] = self.env
        return event_dict


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structured logging for the application.

    Console output in debug mode, JSON lines otherwise. Context bound with
    :func:`plugin_scope` is merged into every entry.
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        AppContext(settings),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.debug:
        renderers: list[Processor] = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=shared_processors + renderers,  # type: ignore
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def plugin_scope(plugin_id: str, hook: str) -> Iterator[None]:
    """Attribute log entries emitted inside a plugin hook to that plugin.

    Binds ``plugin`` and ``hook`` as context variables, so plugins log with
    their plain module logger and still get tagged.

    Args:
        plugin_id: Plugin whose code is about to run
        hook: Lifecycle hook name, e.g. "initialize" or "cleanup"
    """
    with structlog.contextvars.bound_contextvars(plugin=plugin_id, hook=hook):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


setup_logging()
