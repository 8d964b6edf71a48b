from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_command(
    logger: logging.Logger,
    resource: str,
    command: str,
    outcome: str,
    duration_ms: int,
    request_id: str | None = None,
    message: str | None = None,
) -> None:
    level = logging.INFO if outcome == "success" else logging.WARNING
    logger.log(
        level,
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": logging.getLevelName(level),
                "resource": resource,
                "command": command,
                "outcome": outcome,
                "duration_ms": duration_ms,
                "request_id": request_id,
                "message": message,
            }
        ),
    )
