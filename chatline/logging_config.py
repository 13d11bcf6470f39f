import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logger = logging.getLogger("chatline")
    logger.setLevel(level.upper())
    if not any(h.get_name() == "chatline" for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name("chatline")
        logger.addHandler(handler)
    logger.propagate = False
