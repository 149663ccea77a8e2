"""
Centralised logging configuration.

Modules obtain their logger via:

    from docx_service.logger import get_logger
    logger = get_logger(__name__)

`configure_logging` is called once by the app factory; it leaves an already
configured root logger (pytest, uvicorn --log-config) untouched.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.setLevel(level)
    root.addHandler(handler)

    # the multipart parser logs every part at DEBUG
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
