"""Logging configuration for docsync commands.

Hook commands answer on stdout, so they log to <log_dir>/<command>.log only.
Interactive commands log to stderr.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    command: str,
    log_dir: Path | None = None,
    level: str = "INFO",
    to_file: bool = False,
) -> Path | None:
    """Configure root logging for one docsync command.

    Args:
        command: Command name, used as the log file stem
        log_dir: Directory for log files (required when to_file)
        level: Logging level name
        to_file: Log to <log_dir>/<command>.log instead of stderr

    Returns:
        Log file path when logging to a file, else None
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if to_file and log_dir is not None:
        log_dir = Path(log_dir).expanduser()
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            # An unwritable log dir must not break a hook; drop the logs instead
            logging.basicConfig(level=log_level, handlers=[logging.NullHandler()], force=True)
            return None
        log_file = log_dir / f"{command}.log"
        logging.basicConfig(
            level=log_level,
            format=LOG_FORMAT,
            handlers=[logging.FileHandler(log_file, encoding="utf-8")],
            force=True,
        )
        return log_file

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    return None


__all__ = ["LOG_FORMAT", "configure_logging"]
