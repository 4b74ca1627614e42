import logging
import os

from rich.logging import RichHandler

# Overrides the default level, e.g. SKYDOCK_LOG_LEVEL=DEBUG to follow polling
LOG_LEVEL_ENV = "SKYDOCK_LOG_LEVEL"


def setup_logger(
    name: str = "skydock", level: int | str | None = None
) -> logging.Logger:
    """
    Configures and returns a logger with RichHandler.
    `level` falls back to $SKYDOCK_LOG_LEVEL, then ERROR.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "").upper() or logging.ERROR

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # One handler per logger, however often this is called
    if not logger.handlers:
        handler = RichHandler(rich_tracebacks=True, markup=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger


logger = setup_logger()
