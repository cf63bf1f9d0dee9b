"""Logging setup: one JSON object per line, or plain text for local runs.

Invariants:
    - Every JSON line carries timestamp (record creation, UTC), level,
      logger and message
    - Request context passed via `extra=` (user_id, question_id, error_code,
      path, ...) is copied into the line only for the whitelisted keys
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "user_id", "question_id", "answer_id", "notification_id",
    "image_id", "error_code", "path", "method",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        })
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Replace root handlers with a single stream handler.

    fmt="json" for deployed instances; anything else gives text lines.
    """
    formatter = JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
