import logging
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty client libraries, quiet unless debugging
NOISY_LOGGERS = ["httpx", "httpcore", "openai", "multipart"]


def configure_logging(level: str = "INFO", debug: bool = False) -> None:
    """
    Configure the root logger for the service and silence chatty libraries.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else level.upper())

    if not debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
