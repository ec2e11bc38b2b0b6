"""Loguru logging configuration for batch runs.

Records go to a human-readable stderr sink; records bound with
``json_output=True`` go to a JSON sink instead.  Records bound with a
``job_id`` carry it in the rendered line.  With a ``log_dir``, everything is
also written to a rotating ``geobatch.log`` and errors to ``geobatch.errors.log``.
"""

import sys
from pathlib import Path

from loguru import logger

_BASE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | "


def _format(record: dict) -> str:
    job_id = record["extra"].get("job_id")
    prefix = "[{extra[job_id]}] " if job_id else ""
    return _BASE_FORMAT + prefix + "{message}\n{exception}"


def _is_json(record: dict) -> bool:
    return bool(record["extra"].get("json_output", False))


def job_logger(job_id: str):
    """Logger bound to a batch job; its lines are tagged with the job ID."""
    return logger.bind(job_id=job_id)


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for log files.  When set, a rotating
            file sink (24 hours, kept 7 days) and an error-only file sink
            (kept 30 days) are added.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_format, filter=lambda record: not _is_json(record))
    logger.add(sys.stderr, level=level, serialize=True, filter=_is_json)

    if not log_dir:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(log_path / "geobatch.log", level=level, format=_format, rotation="24h", retention="7 days")
    logger.add(log_path / "geobatch.errors.log", level="ERROR", format=_format, retention="30 days")
