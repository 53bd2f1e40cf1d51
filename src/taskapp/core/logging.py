"""Root logger setup for the API process."""

import json
import logging
import logging.config
from datetime import UTC, datetime

from taskapp.config import Settings

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Libraries this app pulls in that log more than an operator wants to read.
# passlib warns on every start about the bcrypt version probe, and PIL and
# multipart log each avatar upload at DEBUG.
NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "passlib": logging.ERROR,
    "PIL": logging.INFO,
    "multipart": logging.INFO,
}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers in production."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(settings: Settings) -> None:
    """
    Send all logging to stdout.

    Production gets JSON lines; every other environment gets text. SQL
    statements are only shown when ``db_echo`` is on.

    Args:
        settings: Application settings
    """
    loggers = {name: {"level": level} for name, level in NOISY_LOGGERS.items()}
    loggers["sqlalchemy.engine"] = {"level": logging.INFO if settings.db_echo else logging.WARNING}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter},
                "text": {"format": TEXT_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json" if settings.environment == "production" else "text",
                },
            },
            "root": {
                "level": logging.DEBUG if settings.debug else logging.INFO,
                "handlers": ["console"],
            },
            "loggers": loggers,
        }
    )
