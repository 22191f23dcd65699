# task_api/core/logging_config.py
import json
import logging
import sys
from datetime import datetime, timezone

READABLE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s - %(message)s"
READABLE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log collectors in production."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["err"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def build_formatter(*, json_format: bool) -> logging.Formatter:
    if json_format:
        return JsonFormatter()
    return logging.Formatter(READABLE_FORMAT, datefmt=READABLE_DATEFMT)


def setup_logging(level: int = logging.INFO, *, json_format: bool = False) -> None:
    """Attach a stdout handler to the root logger unless something already did."""
    logging.getLogger("task_api").setLevel(level)
    # request lines come from our own middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root = logging.getLogger()
    if root.handlers:
        return  # uvicorn, pytest
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json_format=json_format))
    root.addHandler(handler)
