from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] | %(message)s"


class RequestIdFilter(logging.Filter):
    """Attach the active request identifier to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        from ..middleware.request_context import get_request_id

        if not hasattr(record, "request_id"):
            record.request_id = get_request_id("-")
        return True


def configure_logging(default_level: str = "INFO") -> logging.Logger:
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not any(getattr(h, "_docchat_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        handler._docchat_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)
    return logging.getLogger("docchat")


__all__ = ["LOG_FORMAT", "RequestIdFilter", "configure_logging"]
