from __future__ import annotations
import sys

from loguru import logger

FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<level>{message}</level>"
)

def configure_logging(verbose: int = 0) -> None:
    logger.remove()
    if verbose == 0:
        level = "INFO"
    elif verbose == 1:
        level = "DEBUG"
    else:
        level = "TRACE"
    logger.add(sys.stderr, level=level, format=FORMAT)
