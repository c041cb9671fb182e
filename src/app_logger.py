"""
src/app_logger.py
─────────────────
A small wrapper around the standard library `logging` module.

configure_logging() is called once at startup; every module then uses
logging.getLogger(__name__).
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Dash's dev server is chatty at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
