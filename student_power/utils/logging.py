"""Logging configuration for the application.

Production output is one line of key="value" pairs per record so cascade
deletes, uploads and rate-limit denials can be grepped by the catalog ids
they carry in ``extra``.
"""

import logging
import sys
from typing import Any

from student_power.config import get_settings

# Attributes every LogRecord has; anything else on a record came from ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

# Catalog context rendered right after the message, in this order
CONTEXT_KEYS = (
    "root",
    "root_id",
    "model",
    "id",
    "university_id",
    "course_id",
    "semester_id",
    "subject_id",
    "pdf_id",
    "storage_key",
    "scope",
    "identifier",
)

MAX_VALUE_LENGTH = 500

# Third-party loggers and the level they are held at
QUIET_LOGGERS = {
    "uvicorn": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "botocore": logging.WARNING,
    "httpx": logging.WARNING,
    "alembic": logging.INFO,
}


def _render_value(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        text = ",".join(str(item) for item in value)
    else:
        text = str(value)
    if len(text) > MAX_VALUE_LENGTH:
        text = text[:MAX_VALUE_LENGTH] + "..."
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class StructuredFormatter(logging.Formatter):
    """Formatter emitting key="value" pairs.

    Fixed fields come first, then the catalog context keys present on the
    record, then any other ``extra`` fields sorted by name. Values are
    escaped so each record stays on one line.
    """

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        for key in CONTEXT_KEYS:
            if key in extras:
                fields[key] = extras.pop(key)
        for key in sorted(extras):
            fields[key] = extras[key]

        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)

        return " ".join(f'{key}="{_render_value(value)}"' for key, value in fields.items())


def setup_logging() -> None:
    """Configure the root logger from settings.

    Replaces existing root handlers with a single stdout handler: structured
    in production, a readable single-line format otherwise.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.LOG_LEVEL)
    if settings.is_production:
        console_handler.setFormatter(StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    else:
        console_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    root_logger.addHandler(console_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    root_logger.info(
        "Logging configured",
        extra={
            "log_level": settings.LOG_LEVEL,
            "environment": settings.ENVIRONMENT,
        },
    )
