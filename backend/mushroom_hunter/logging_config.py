"""
Mushroom Hunter Backend — Logging Configuration
=================================================

What:  One place that configures stdlib logging for the API server and the
       CLI commands.
How:   Root logger → stdout (Docker captures it), level from settings,
       noisy third-party loggers turned down to WARNING.

Format: 2024-01-15T12:00:00 [INFO] mushroom_hunter.importer.species_import: ...
"""

import logging
import sys

from mushroom_hunter.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
