import logging

from luckysnap.core.config import settings


def configure_logging() -> logging.Logger:
    logger = logging.getLogger("luckysnap")
    if not logger.handlers:
        logging.basicConfig(
            level=getattr(logging, settings.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    return logger
