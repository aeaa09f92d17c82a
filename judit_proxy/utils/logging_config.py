"""
judit_proxy/utils/logging_config.py

One-time structlog configuration for the proxy process.

Loggers are still obtained the usual way (`structlog.get_logger(__name__)`);
this only decides the processor chain and the minimum level, which comes
from Settings.log_level.
"""

from __future__ import annotations

import logging

import structlog

_configured = False


def configure_logging(log_level: str = "INFO") -> None:
    global _configured
    if _configured:
        return

    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    _configured = True
