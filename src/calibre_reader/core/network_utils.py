# calibre_reader/src/calibre_reader/core/network_utils.py
"""
Utilitaires réseau génériques (retry backoff, requêtes HTTP).
"""

import logging
import random
import time
from functools import wraps
from typing import Callable, Dict, Optional

import requests

from ..config import (
    API_TIMEOUT,
    INITIAL_BACKOFF,
    JITTER,
    MAX_BACKOFF,
    MAX_RETRIES,
)
from .errors import UpstreamError

logger = logging.getLogger(__name__)

# Seules les erreurs de transport sont retentées; un statut HTTP en erreur ne l'est pas
TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


def backoff_delay(attempt: int, initial: float, maximum: float, jitter: float) -> float:
    """Délai avant la tentative suivante, doublé à chaque échec et plafonné à maximum."""
    base = min(maximum, initial * 2 ** (attempt - 1))
    return max(0.0, min(maximum, base * (1 + random.uniform(-jitter, jitter))))


def retry_backoff(
    max_retries: int = MAX_RETRIES,
    initial_backoff: float = INITIAL_BACKOFF,
    max_backoff: float = MAX_BACKOFF,
    jitter: float = JITTER,
    retry_on: tuple = TRANSIENT_ERRORS,
):
    """
    Décorateur qui retente un appel réseau sur erreur de transport.

    La dernière erreur est relancée telle quelle après max_retries tentatives.
    """

    def deco(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt >= max_retries:
                        logger.error(
                            "Giving up on %s after %d attempts: %s", func.__name__, attempt, e
                        )
                        raise
                    delay = backoff_delay(attempt, initial_backoff, max_backoff, jitter)
                    logger.warning("%s failed (%s), retrying in %.2fs", func.__name__, e, delay)
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return deco


def _error_details(response: requests.Response) -> str:
    try:
        return response.text
    except Exception:
        return ""


@retry_backoff()
def _send_get(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, str]],
    timeout: float,
) -> requests.Response:
    return session.get(url, params=params, timeout=timeout)


def http_get(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, str]] = None,
    timeout: float = API_TIMEOUT,
) -> requests.Response:
    """
    Effectue une requête HTTP GET avec retry automatique.

    Raises:
        UpstreamError: réponse non 2xx, ou serveur injoignable après les retries
    """
    logger.debug("HTTP GET %s params=%s", url, params)
    try:
        r = _send_get(session, url, params, timeout)
    except requests.RequestException as e:
        raise UpstreamError(f"Fetch failed: {e} at {url}") from e

    if not r.ok:
        details = _error_details(r)
        message = f"Fetch failed: {r.status_code} {r.reason} at {r.url}"
        if details:
            message += f" - {details}"
        raise UpstreamError(message)
    return r
