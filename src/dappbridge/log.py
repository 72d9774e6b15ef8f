import logging
import sys

LOGGER_NAME = "dappbridge"


def configure_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """
    Configure the dappbridge logger for command-line use.

    Library modules only create loggers; handlers are attached here so that
    embedding applications keep control of their own logging setup.

    Args:
        level: Logging level (e.g., logging.DEBUG, "INFO")

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False

    return logger
