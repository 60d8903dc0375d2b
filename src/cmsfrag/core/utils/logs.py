"""Root logger setup for the CLI"""

import logging
import sys


LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Install a single stderr handler on the root logger at the given level."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.handlers.clear()
    root.addHandler(handler)
