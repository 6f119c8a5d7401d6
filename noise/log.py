import sys

from loguru import logger


def init_logger(debug: bool = False) -> None:
    """Replace loguru's default sink with the client's stderr format."""
    logger.remove()

    if debug:
        logger_level = "DEBUG"
        logger_format = (
            "<green>{time:MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        logger_level = "INFO"
        logger_format = "{time:MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"
    logger.add(sys.stderr, level=logger_level, format=logger_format)
