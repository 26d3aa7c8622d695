"""Logging configuration for hcptf.

Diagnostics go to stderr so they never mix with table or JSON output on
stdout. Text is the default; JSON lines are available for log shipping.
Configure via HCPTF_LOG_LEVEL and HCPTF_LOG_FORMAT (see Settings).
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger


def _build_json_formatter() -> logging.Formatter:
    fields = [
        "asctime",
        "levelname",
        "name",
        "message",
        "module",
        "funcName",
        "lineno",
    ]
    fmt = " ".join([f"%({f})s" for f in fields])
    return jsonlogger.JsonFormatter(fmt=fmt)


def configure_logging(
    level: str = "WARNING", fmt: str = "text", stream: Optional[TextIO] = None
) -> None:
    level_upper = level.upper()
    log_level = getattr(logging, level_upper, logging.WARNING)

    root = logging.getLogger()
    root.setLevel(log_level)

    # Remove default handlers to avoid duplicate logs
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt.lower() == "json":
        handler.setFormatter(_build_json_formatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
    root.addHandler(handler)

    # httpx logs every request at INFO; keep it in line with our level
    for logger_name in ["httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.WARNING))
