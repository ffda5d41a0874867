"""
Console logging for the runtime entry points.
Library modules only call logging.getLogger(__name__).
"""

from __future__ import annotations

import logging


def setup_logging(level: str = "INFO") -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(asctime)s  %(levelname)-5s  %(name)s  %(message)s",
                                           datefmt="%H:%M:%S"))
    root.addHandler(console)
    return root
