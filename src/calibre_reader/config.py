# calibre_reader/src/calibre_reader/config.py
"""
Configuration et constantes pour Calibre Reader
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

APP_NAME = "calibre-reader"
APP_VERSION = "1.0.0"

# ---------- Configuration réseau ----------
API_TIMEOUT = 30
DEFAULT_CALIBRE_URL = "http://[::1]:8080/"

# ---------- Configuration retry/backoff ----------
MAX_RETRIES = 3
INITIAL_BACKOFF = 0.5  # seconds
MAX_BACKOFF = 8.0
JITTER = 0.3  # fraction for jitter

# ---------- Lecture et recherche ----------
DEFAULT_CHUNK_LENGTH = 30000
DEFAULT_BOOK_LIMIT = 100
MAX_SEARCH_HITS = 50
SNIPPET_WINDOW = 200
METADATA_FETCH_SIZE = 1000000

# ---------- Extensions supportées ----------
IMAGE_EXT = (".jpg", ".jpeg", ".png", ".gif", ".webp")

# ---------- Configuration logging ----------
LOG_FILENAME = "calibre_reader.log"
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 5
LOG_ENCODING = "utf-8"

# ---------- Variables d'environnement ----------
URL_ENV_VAR = "CALIBRE_URL"
USERNAME_ENV_VAR = "CALIBRE_USERNAME"
PASSWORD_ENV_VAR = "CALIBRE_PASSWORD"
LOG_DIR_ENV_VAR = "CALIBRE_READER_LOG_DIR"

VERBOSE_FLAGS = ("--verbose", "-v")


@dataclass
class Settings:
    """Paramètres d'exécution du serveur."""

    calibre_url: str = DEFAULT_CALIBRE_URL
    username: Optional[str] = None
    password: Optional[str] = None
    verbose: bool = False
    log_dir: Optional[str] = None


def load_settings(
    argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """
    Construit les paramètres depuis les arguments et l'environnement.

    Args:
        argv: Arguments de la ligne de commande (sans le nom du programme)
        environ: Variables d'environnement (os.environ par défaut)

    Returns:
        Objet Settings
    """
    argv = list(argv or [])
    env = os.environ if environ is None else environ

    # Les chaînes vides comptent comme absentes
    return Settings(
        calibre_url=env.get(URL_ENV_VAR) or DEFAULT_CALIBRE_URL,
        username=env.get(USERNAME_ENV_VAR) or None,
        password=env.get(PASSWORD_ENV_VAR) or None,
        verbose=any(flag in argv for flag in VERBOSE_FLAGS),
        log_dir=env.get(LOG_DIR_ENV_VAR) or None,
    )


# ---------- Initialisation des dossiers ----------
def ensure_directories(settings: Settings):
    """Crée le dossier de logs s'il est configuré."""
    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)
