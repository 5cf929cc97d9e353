# calibre_reader/src/calibre_reader/core/book_service.py
"""
Service de lecture des livres Calibre.

Service réutilisable qui orchestre le téléchargement de l'EPUB, son
analyse structurelle et l'extraction du texte des chapitres.

Chaque opération ouvre sa propre archive et la referme avant de rendre
la main, y compris en cas d'erreur. Rien n'est mis en cache entre deux
appels.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Union

from ..config import DEFAULT_BOOK_LIMIT, DEFAULT_CHUNK_LENGTH, MAX_SEARCH_HITS
from .calibre_client import CalibreClient
from .epub import EpubArchive, list_chapters
from .models import BookSummary, Chapter, LibraryInfo, SearchHit, TextChunk
from .search import search_chapters
from .text_utils import html_to_markdown, read_chunk

logger = logging.getLogger(__name__)


def _book_summary(book: Dict[str, Any], **extra) -> BookSummary:
    return BookSummary(
        id=book.get("id") or book.get("application_id"),
        title=book.get("title"),
        authors=book.get("authors"),
        **extra,
    )


class BookService:
    """
    Opérations de haut niveau sur les livres d'un serveur Calibre:
    - Navigation dans les bibliothèques et métadonnées
    - Liste des chapitres et lecture de leur contenu
    - Recherche plein texte dans un livre
    - Accès aux fichiers bruts de l'archive EPUB
    """

    def __init__(self, client: CalibreClient):
        self.client = client

    @contextmanager
    def open_epub(self, library_id: str, book_id: int) -> Iterator[EpubArchive]:
        """Télécharge et ouvre l'archive EPUB d'un livre, fermée en sortie."""
        data = self.client.fetch_epub_bytes(library_id, book_id)
        with EpubArchive.open(data) as archive:
            yield archive

    # --- Bibliothèques ---

    def list_libraries(self) -> List[LibraryInfo]:
        return self.client.get_libraries()

    def list_books(
        self, library_id: str, limit: int = DEFAULT_BOOK_LIMIT, offset: int = 0
    ) -> Dict[str, Any]:
        books, total = self.client.get_books(library_id, limit, offset)
        return {"books": [_book_summary(b) for b in books], "total": total}

    def search_books(self, query: str) -> List[BookSummary]:
        """Recherche des livres dans toutes les bibliothèques."""
        results = []
        for library in self.client.get_libraries():
            books, _ = self.client.get_books(library.id, DEFAULT_BOOK_LIMIT, 0, query)
            for book in books:
                results.append(
                    _book_summary(book, library_id=library.id, library_name=library.name)
                )
        logger.info("search_books(%r): %d result(s)", query, len(results))
        return results

    def get_book_metadata(self, library_id: str, book_id: int) -> Dict[str, Any]:
        return self.client.get_book_metadata(library_id, book_id)

    def get_book_cover(self, library_id: str, book_id: int) -> bytes:
        return self.client.get_book_cover(library_id, book_id)

    # --- Chapitres ---

    def list_chapters(self, library_id: str, book_id: int) -> List[Chapter]:
        with self.open_epub(library_id, book_id) as archive:
            chapters = list_chapters(archive)
        logger.debug("Book %s: %d chapter(s)", book_id, len(chapters))
        return chapters

    def get_chapter_content(self, library_id: str, book_id: int, path: str) -> str:
        """Retourne le XHTML brut d'un chapitre."""
        return self.get_epub_file(library_id, book_id, path)

    def get_chapter_markdown(self, library_id: str, book_id: int, path: str) -> str:
        return html_to_markdown(self.get_chapter_content(library_id, book_id, path))

    def read_chapter_markdown(
        self,
        library_id: str,
        book_id: int,
        path: str,
        offset: int = 0,
        length: int = DEFAULT_CHUNK_LENGTH,
    ) -> TextChunk:
        """Retourne une fenêtre du texte Markdown d'un chapitre."""
        return read_chunk(self.get_chapter_markdown(library_id, book_id, path), offset, length)

    def search_in_book(
        self, library_id: str, book_id: int, query: str, limit: int = MAX_SEARCH_HITS
    ) -> List[SearchHit]:
        """
        Recherche un texte littéral dans tous les chapitres d'un livre.

        L'archive n'est téléchargée qu'une fois pour toute la recherche.
        """
        with self.open_epub(library_id, book_id) as archive:

            def load_markup(path: str) -> str:
                # Un chapitre du spine absent de l'archive est traité comme vide
                return archive.read_text(path) if archive.has_file(path) else ""

            chapters = list_chapters(archive)
            hits = search_chapters(chapters, load_markup, query, limit=limit)
        logger.info("search_in_book(%s, %r): %d hit(s)", book_id, query, len(hits))
        return hits

    # --- Fichiers de l'archive ---

    def list_epub_files(self, library_id: str, book_id: int) -> List[str]:
        with self.open_epub(library_id, book_id) as archive:
            return archive.filenames()

    def get_epub_file(
        self, library_id: str, book_id: int, path: str, binary: bool = False
    ) -> Union[str, bytes]:
        with self.open_epub(library_id, book_id) as archive:
            if binary:
                return archive.read_bytes(path)
            return archive.read_text(path)
