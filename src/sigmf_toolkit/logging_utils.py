"""Structured logging helpers."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

JSON_LOGS_ENV = "SIGMF_TOOLKIT_JSON_LOGS"


def _json_logs_from_env() -> bool:
    return os.getenv(JSON_LOGS_ENV, "false").lower() == "true"


def configure_logging(level: str = "INFO", json_logs: bool | None = None) -> None:
    """Configure global logging. Respects SIGMF_TOOLKIT_JSON_LOGS env override."""

    if json_logs is None:
        json_logs = _json_logs_from_env()

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s" if json_logs else "%(levelname)s:%(name)s:%(message)s",
    )


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    json_logs: bool | None = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit a structured log event."""

    if not logger.isEnabledFor(level):
        return
    if json_logs is None:
        json_logs = _json_logs_from_env()

    payload = {"event": event, **fields}
    if json_logs:
        logger.log(level, json.dumps(payload, default=str))
    else:
        logger.log(level, payload)
