import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "SCOUNDREL_LOG_LEVEL"


def configure_logging(level: int = logging.INFO, level_name: Optional[str] = None) -> None:
    """Configure the root logger with a stderr handler.

    ``level_name`` (e.g. from settings) overrides ``level``; the
    SCOUNDREL_LOG_LEVEL env var overrides both.
    """
    for name in (level_name, os.getenv(LOG_LEVEL_ENV)):
        if name:
            level = getattr(logging, name.upper(), level)

    handler = logging.StreamHandler(stream=sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplicates in repeated test runs
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
