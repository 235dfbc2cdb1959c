import logging
import sys

ROOT = "hulk_runner"


def get_logger(name: str, verbose: bool = True) -> logging.Logger:
    logger = logging.getLogger(f"{ROOT}.{name}")
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    return logger


def set_verbosity(verbose: bool) -> None:
    """Switch every hulk_runner logger between DEBUG and INFO."""
    level = logging.DEBUG if verbose else logging.INFO
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith(ROOT + ".") and isinstance(logger, logging.Logger):
            logger.setLevel(level)
