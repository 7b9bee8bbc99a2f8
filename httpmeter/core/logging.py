"""Logging setup.

Loggers are plain stdlib loggers wrapped in ``ContextualLogger`` so callers
can attach structured dimensions with ``with_context(...)``.  In ``json``
mode records are rendered by python-json-logger and every dimension becomes
a top-level key; in ``text`` mode dimensions are appended to the message.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

from pythonjsonlogger.json import JsonFormatter

from httpmeter.core.config import settings

_JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s%(context)s"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that carries a dictionary of context dimensions."""

    def __init__(self, logger: logging.Logger, dimensions: Optional[dict[str, Any]] = None):
        super().__init__(logger, dimensions or {})
        self.dimensions: dict[str, Any] = dict(dimensions or {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.dimensions)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = {**extra, "_context": extra}
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with *dimensions* merged into the current context."""
        return ContextualLogger(self.logger, {**self.dimensions, **dimensions})


class _TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "_context", None) or {}
        record.context = (
            " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]" if context else ""
        )
        return super().format(record)


class _JsonFormatter(JsonFormatter):
    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        # Dimensions are already flattened into the record; drop the carrier.
        log_record.pop("_context", None)


class LoggerConfigurator:
    """Factory for configured ``ContextualLogger`` instances."""

    @staticmethod
    def configure_logger(
        name: str,
        dimensions: Optional[dict[str, Any]] = None,
    ) -> ContextualLogger:
        """Configure a stdout logger and wrap it with context dimensions.

        Args:
            name: Logger name, usually ``__name__``.
            dimensions: Initial context attached to every record.

        Returns:
            The configured ``ContextualLogger``.
        """
        base = logging.getLogger(name)
        base.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

        if not base.handlers:
            handler = logging.StreamHandler(sys.stdout)
            if settings.LOG_FORMAT == "json":
                handler.setFormatter(_JsonFormatter(fmt=_JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ"))
            else:
                handler.setFormatter(_TextFormatter(fmt=_TEXT_FORMAT))
            base.addHandler(handler)
            base.propagate = False

        return ContextualLogger(base, dimensions)


logger = LoggerConfigurator.configure_logger("httpmeter", {"service": settings.SERVICE_NAME})
