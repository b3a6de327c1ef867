"""Logging setup.

The editor owns the terminal while it runs, so log records never go to the
console. They are written to the file configured in `[logging]`, or dropped
when no file is configured.
"""

import logging

from rawedit.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("rawedit")


def setup_logging(config: LoggingConfig) -> None:
    for old_handler in list(logger.handlers):
        logger.removeHandler(old_handler)
        old_handler.close()

    handler: logging.Handler
    if config.file is None:
        handler = logging.NullHandler()
    else:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(config.file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(config.level)
    logger.propagate = False
