"""
Logging configuration
"""

import logging
import sys
from core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s%(context_suffix)s"


class ErrorContextFilter(logging.Filter):
    """
    Renders the structured context of a WeightsException.

    Callers pass it as extra={"error_context": exc.to_dict()}; records
    without it get an empty suffix.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        error_context = getattr(record, "error_context", None)
        if error_context:
            details = error_context.get("context") or {}
            rendered = ", ".join(
                f"{key}={value}" for key, value in details.items()
                if key != "error_timestamp"
            )
            record.context_suffix = f" | {error_context.get('error_type')}: {rendered}" if rendered else ""
        else:
            record.context_suffix = ""
        return True


def setup_logging(level: str = None):
    """Configure application logging"""

    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ErrorContextFilter())

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler]
    )

    # SQLAlchemy and the scheduler are chatty at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured at {level_name} level")
