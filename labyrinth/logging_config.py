"""Console log output for the labyrinth driver.

The maze, controller and facade only ever write to a ``logging.Logger``;
handlers are installed here, once, by whatever runs the game.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from . import config


def configure_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """Route labyrinth log records to ``stream`` (stdout by default).

    A second call only changes the level, so re-running ``main()`` in one
    process does not print every line twice.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not root.handlers:
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_DATEFMT))
        root.addHandler(handler)
    return root
