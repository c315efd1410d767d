"""structlog setup for the CLI; library code only calls ``structlog.get_logger``."""

from __future__ import annotations

import logging.config
import os

import structlog

LEVEL_ENV = "PLUGINDESK_LOG_LEVEL"
FORMAT_ENV = "PLUGINDESK_LOG_FORMAT"


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    raise ValueError(f"{FORMAT_ENV} must be 'console' or 'json', got {log_format!r}")


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Route structlog events through one stderr handler.

    *level* and *log_format* fall back to ``PLUGINDESK_LOG_LEVEL``
    (default ``INFO``) and ``PLUGINDESK_LOG_FORMAT`` (``console`` or
    ``json``). Stdout is left alone so ``--json`` output stays parseable.
    """
    log_level = (level or os.environ.get(LEVEL_ENV) or "INFO").upper()
    renderer = _renderer((log_format or os.environ.get(FORMAT_ENV) or "console").lower())
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plugindesk": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "plugindesk",
                },
            },
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {"plugindesk": {"level": log_level}},
        }
    )
