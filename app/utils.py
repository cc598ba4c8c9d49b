"""
Logging helpers shared by every module.

Usage:
    from app.utils import get_logger

    log = get_logger(__name__)
    log.info("Something happened")
"""
import logging
import os
import sys

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root = logging.getLogger("app")
    root.addHandler(handler)
    root.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``app`` namespace."""
    _configure_root()
    if name == "__main__" or not name.startswith("app"):
        name = f"app.{name}"
    return logging.getLogger(name)
