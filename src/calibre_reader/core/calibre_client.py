# calibre_reader/src/calibre_reader/core/calibre_client.py
"""
Client HTTP du serveur de contenu Calibre.

Responsabilité unique: interroger l'API AJAX de Calibre (bibliothèques,
livres, métadonnées) et télécharger les fichiers (EPUB, couverture).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from ..config import API_TIMEOUT, DEFAULT_BOOK_LIMIT, METADATA_FETCH_SIZE
from .errors import UpstreamError
from .models import LibraryInfo
from .network_utils import http_get

logger = logging.getLogger(__name__)

EPUB_FORMAT = "EPUB"


def _q(value: Any) -> str:
    return quote(str(value), safe="")


class CalibreClient:
    """
    Client du serveur de contenu Calibre.

    L'authentification HTTP basic n'est utilisée que si l'identifiant et le
    mot de passe sont tous deux fournis.
    """

    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url[:-1] if base_url.endswith("/") else base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        if username and password:
            self.session.auth = (username, password)
        logger.debug("CalibreClient initialized for %s", self.base_url)

    # --- Requêtes de base ---

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return http_get(self.session, self.base_url + path, params=params, timeout=self.timeout)

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        r = self._get(path, params)
        try:
            return r.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON response at {r.url}: {e}") from e

    # --- Bibliothèques et livres ---

    def _count_books(self, library_id: str) -> int:
        data = self._get_json(f"/ajax/books/{_q(library_id)}", {"num": 1})
        if not data:
            return 0
        count = data.get("total_num") or data.get("count") or 0
        if count == 0 and data.get("book_ids"):
            count = len(data["book_ids"])
        return count

    def get_libraries(self) -> List[LibraryInfo]:
        """
        Liste les bibliothèques avec leur nombre de livres.

        Le nombre de livres vient, par ordre de priorité, de la description
        de la bibliothèque, du résultat de recherche courant, ou d'une
        requête dédiée. Si cette dernière échoue, il reste inconnu.
        """
        data = self._get_json("/interface-data/init")
        libraries = data.get("library_info") or data.get("library_map") or {}

        result = []
        for library_id, info in libraries.items():
            if isinstance(info, str):
                name, count = info, None
            else:
                info = info or {}
                name, count = info.get("name") or library_id, info.get("num_books")

            if count is None and data.get("library_id") == library_id and data.get("search_result"):
                count = data["search_result"].get("num_books_without_search")

            if count is None:
                try:
                    count = self._count_books(library_id)
                except UpstreamError as e:
                    logger.warning("Could not count books in library %s: %s", library_id, e)

            result.append(LibraryInfo(id=library_id, name=name, book_count=count))
        return result

    def get_books(
        self, library_id: str, limit: int = DEFAULT_BOOK_LIMIT, offset: int = 0, search: str = ""
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Liste les livres d'une bibliothèque, avec recherche optionnelle.

        Args:
            library_id: Identifiant de la bibliothèque
            limit: Nombre maximal de livres
            offset: Décalage dans la liste
            search: Requête au format Calibre (author:"...", title:"...")

        Returns:
            Tuple (métadonnées des livres, nombre total)
        """
        if search:
            data = self._get_json(
                "/ajax/search",
                {
                    "query": search,
                    "library_id": library_id,
                    "num": limit,
                    "offset": offset,
                    "sort": "timestamp",
                    "sort_order": "desc",
                },
            )
            book_ids = data.get("book_ids") or []
            total = data.get("total_num") or 0
        else:
            data = self._get_json(f"/ajax/books/{_q(library_id)}", {"num": limit, "start": offset})
            book_ids = data.get("book_ids") or []
            total = data.get("total_num") or len(book_ids)

        if not book_ids:
            return [], total

        metadata = self._get_json(
            f"/ajax/books/{_q(library_id)}", {"num": METADATA_FETCH_SIZE, "start": 0}
        )
        metadata_map = metadata.get("metadata") or metadata
        # Les clés JSON sont des chaînes, les book_ids des entiers
        books = [metadata_map.get(str(book_id)) or {"id": book_id} for book_id in book_ids]
        return books, total

    def get_book_metadata(self, library_id: str, book_id: int) -> Dict[str, Any]:
        return self._get_json(f"/ajax/book/{_q(book_id)}/{_q(library_id)}")

    def get_book_formats(self, library_id: str, book_id: int) -> List[str]:
        return self.get_book_metadata(library_id, book_id).get("formats") or []

    # --- Téléchargements ---

    def download_book(self, library_id: str, book_id: int, fmt: str) -> bytes:
        return self._get(f"/get/{_q(fmt)}/{_q(book_id)}/{_q(library_id)}").content

    def get_book_cover(self, library_id: str, book_id: int) -> bytes:
        return self._get(f"/get/cover/{_q(book_id)}/{_q(library_id)}").content

    def fetch_epub_bytes(self, library_id: str, book_id: int) -> bytes:
        """
        Télécharge l'archive EPUB d'un livre.

        Raises:
            UpstreamError: le livre n'a pas de format EPUB, ou échec réseau
        """
        formats = self.get_book_formats(library_id, book_id)
        epub_format = next((f for f in formats if f.upper() == EPUB_FORMAT), None)
        if not epub_format:
            raise UpstreamError(f"Book {book_id} does not have an EPUB format")
        logger.info("Downloading EPUB for book %s in library %s", book_id, library_id)
        return self.download_book(library_id, book_id, epub_format)
