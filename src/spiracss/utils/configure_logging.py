# src/spiracss/utils/configure_logging.py
import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

LevelLike = Union[str, int]

PLAIN_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


class LogWithTqdm(logging.Handler):
    """
    Routes log records through `tqdm.write()` so warnings printed while linting
    many files do not tear the progress bar.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def resolve_level(level: Optional[LevelLike], default: int = logging.WARNING) -> int:
    """Accepts 'debug', 'INFO', 10, ... and falls back to `default` for anything else."""
    if isinstance(level, bool):
        return default
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    return default


def configure_logger(
        general_level: Optional[LevelLike] = "WARNING",
        module_specific_levels: Optional[Dict[str, LevelLike]] = None
) -> logging.Logger:
    """
    Configures the root logger with a TQDM-friendly handler.

    Below INFO the records carry timestamp and origin; otherwise only the
    message is printed, since CLI warnings already carry their own `WARN [...]` tag.
    """
    log_level = resolve_level(general_level)

    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT if log_level < logging.INFO else PLAIN_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if module_specific_levels:
        for name, level in module_specific_levels.items():
            logging.getLogger(name).setLevel(resolve_level(level, logging.INFO))

    return root_logger
