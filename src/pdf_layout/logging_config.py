import logging
import sys
from pathlib import Path

LOGGER_NAME = "pdf_layout"


def setup_logging(level: int = logging.INFO, log_file: Path | str | None = None) -> logging.Logger:
    """
    Configure the package logger with a console handler and an optional file handler.
    Existing handlers are replaced, so calling this twice does not duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
