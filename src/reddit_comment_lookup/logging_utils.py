import logging
from typing import Callable


LogCallback = Callable[..., None]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def logger_callback(logger: logging.Logger) -> LogCallback:
    """Adapt a stdlib logger to the ``log(msg, level)`` callback used across the package."""

    def log(msg: str, level: str = "info") -> None:
        logger.log(_LEVELS.get(level, logging.INFO), msg)

    return log


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
        force=True,
    )
    logging.getLogger("reddit_comment_lookup").setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
