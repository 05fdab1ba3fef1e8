import logging
import sys
from pathlib import Path

from netspeed.util import system

LOG_FORMAT = "%(asctime)s %(unpadded)s {name}.%(funcName)s - %(message)s"


class LevelPadFormatter(logging.Formatter):
    LEVEL_WIDTH = len("WARNING")

    def format(self, record):
        level = record.levelname
        pad = " " * (self.LEVEL_WIDTH - len(level))
        record.padded = f"[{level}]{pad}"
        record.unpadded = f"[{level}]"
        return super().format(record)


def default_logfile(name: str) -> Path:
    return system.get_cache_directory() / f"{name}.log"


def _open_handler(logfile: Path) -> logging.Handler:
    """
    Log to the file, or to stderr when it cannot be opened. stdout belongs to
    the status bar and never receives log records.
    """
    try:
        return logging.FileHandler(logfile, mode="a", encoding="utf-8")
    except OSError as e:
        print(f'cannot open "{logfile}" ({e}), logging to stderr', file=sys.stderr)
        return logging.StreamHandler(sys.stderr)


def configure(
    debug: bool, name: str = system.APP_NAME, logfile: Path | None = None
) -> logging.Logger:
    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Configured before: only follow the new level
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = _open_handler(logfile or default_logfile(name))
    handler.setLevel(level)
    handler.setFormatter(LevelPadFormatter(LOG_FORMAT.format(name=name)))
    logger.addHandler(handler)

    return logger
