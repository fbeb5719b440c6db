# File: streamvault/core/logging.py

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attaches one stream handler to the 'streamvault' logger.
    Safe to call repeatedly; later calls only adjust the level.
    """
    root = logging.getLogger("streamvault")
    root.setLevel(level.upper())

    if not any(getattr(h, "_streamvault", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._streamvault = True
        root.addHandler(handler)

    return root
