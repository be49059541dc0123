from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

LOG_FILE_NAME = "tasklist.jsonl"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, msg plus structured extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({k: v for k, v in record.__dict__.items() if k not in _RESERVED})

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def log_path(log_dir: Optional[str] = None) -> Path:
    return Path(log_dir or os.getenv("LOG_DIR", "./logs")) / LOG_FILE_NAME


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    path = log_path(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        # drop our own handlers from a previous call (app reload, tests)
        if getattr(h, "_tasklist", False):
            root.removeHandler(h)
            h.close()

    fmt = JsonFormatter()

    console = logging.StreamHandler()
    file_handler = RotatingFileHandler(
        path,
        maxBytes=10_000_000,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    for h in (console, file_handler):
        h.setLevel(level)
        h.setFormatter(fmt)
        h._tasklist = True  # type: ignore[attr-defined]
        root.addHandler(h)

    # access lines come from our middleware
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)
    logging.getLogger("uvicorn.error").setLevel(level)
