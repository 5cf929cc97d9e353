# calibre_reader/src/calibre_reader/main.py
"""
Point d'entrée principal pour Calibre Reader
Configure le logging puis lance le serveur MCP sur stdio
"""

import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Sequence

from .config import (
    LOG_BACKUP_COUNT,
    LOG_ENCODING,
    LOG_FILENAME,
    LOG_MAX_BYTES,
    Settings,
    ensure_directories,
    load_settings,
)
from .core.book_service import BookService
from .core.calibre_client import CalibreClient
from .server import serve

LOGGER_NAME = "calibre_reader"


def setup_logging(settings: Settings) -> logging.Logger:
    """
    Configure le système de logging.

    stdout est réservé au protocole MCP: la console passe par stderr.
    Le mode verbeux est une valeur de configuration, pas un état global.
    """
    ensure_directories(settings)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    # Handler pour fichier avec rotation (seulement si un dossier est configuré)
    if settings.log_dir:
        logfile = os.path.join(settings.log_dir, LOG_FILENAME)
        handler = RotatingFileHandler(
            logfile, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding=LOG_ENCODING
        )
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Handler pour console (stderr)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if settings.verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s"))
    logger.addHandler(console)

    return logger


def build_service(settings: Settings) -> BookService:
    client = CalibreClient(settings.calibre_url, settings.username, settings.password)
    return BookService(client)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Point d'entrée principal."""
    settings = load_settings(sys.argv[1:] if argv is None else argv)
    logger = setup_logging(settings)
    logger.info("Starting Calibre Reader for %s", settings.calibre_url)

    try:
        asyncio.run(serve(build_service(settings)))
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0
    except Exception:
        logger.exception("Fatal error in server loop")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
