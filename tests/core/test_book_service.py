"""
Tests pour le module core.book_service.
"""

from unittest.mock import MagicMock, patch

import pytest

from calibre_reader.core.book_service import BookService
from calibre_reader.core.epub.archive import EpubArchive
from calibre_reader.core.errors import ArchiveError, EntryError, UpstreamError
from calibre_reader.core.models import Chapter, LibraryInfo


class TestChapters:
    """Tests pour la liste et la lecture des chapitres."""

    def test_list_chapters(self, mock_client):
        """Test de la liste des chapitres d'un livre."""
        service = BookService(mock_client)
        chapters = service.list_chapters("lib", 1)

        mock_client.fetch_epub_bytes.assert_called_once_with("lib", 1)
        assert chapters[0] == Chapter("Chapter One", "OEBPS/text/ch01.html")
        assert len(chapters) == 3

    def test_chapters_are_recomputed_on_every_call(self, mock_client):
        """Test que l'EPUB est relu à chaque appel, sans cache."""
        service = BookService(mock_client)
        service.list_chapters("lib", 1)
        service.list_chapters("lib", 1)
        assert mock_client.fetch_epub_bytes.call_count == 2

    def test_get_chapter_content_is_unmodified(self, mock_client, sample_epub_files):
        """Test que le XHTML du chapitre est retourné tel quel."""
        service = BookService(mock_client)
        content = service.get_chapter_content("lib", 1, "OEBPS/text/ch02.html")
        assert content == sample_epub_files["OEBPS/text/ch02.html"]

    def test_get_chapter_markdown(self, mock_client):
        """Test de la conversion d'un chapitre en Markdown."""
        service = BookService(mock_client)
        text = service.get_chapter_markdown("lib", 1, "OEBPS/text/ch02.html")
        assert text == "## Chapter Two\n\n\nMorning came & the village woke."

    def test_read_chapter_markdown_window(self, mock_client):
        """Test de la lecture d'une fenêtre du Markdown d'un chapitre."""
        service = BookService(mock_client)
        chunk = service.read_chapter_markdown("lib", 1, "OEBPS/text/ch02.html", offset=0, length=5)
        assert chunk.truncated is True
        assert chunk.content.startswith("## Ch\n\n... (truncated, use offset 5")

    def test_missing_chapter(self, mock_client):
        """Test qu'un chapitre absent lève EntryError."""
        service = BookService(mock_client)
        with pytest.raises(EntryError):
            service.get_chapter_content("lib", 1, "OEBPS/text/nope.html")

    def test_invalid_archive(self):
        """Test qu'un EPUB illisible lève ArchiveError."""
        client = MagicMock()
        client.fetch_epub_bytes.return_value = b"not a zip"
        with pytest.raises(ArchiveError):
            BookService(client).list_chapters("lib", 1)

    def test_upstream_error_propagates(self):
        """Test qu'une erreur du client Calibre est propagée."""
        client = MagicMock()
        client.fetch_epub_bytes.side_effect = UpstreamError("Book 1 does not have an EPUB format")
        with pytest.raises(UpstreamError):
            BookService(client).list_chapters("lib", 1)


class TestArchiveLifetime:
    """L'archive est fermée à la sortie de chaque opération, même en erreur."""

    def test_archive_closed_after_error(self, mock_client):
        """Test que l'archive est fermée même en cas d'erreur."""
        opened = []
        real_open = EpubArchive.open

        def tracking_open(data):
            archive = real_open(data)
            opened.append(archive)
            return archive

        service = BookService(mock_client)
        with patch.object(EpubArchive, "open", side_effect=tracking_open):
            service.list_chapters("lib", 1)
            with pytest.raises(EntryError):
                service.get_epub_file("lib", 1, "missing.txt")

        assert len(opened) == 2
        assert all(archive.closed for archive in opened)


class TestSearchInBook:
    """Tests pour search_in_book."""

    def test_search_whole_book_with_single_download(self, mock_client):
        """Test que la recherche ne télécharge l'EPUB qu'une fois."""
        service = BookService(mock_client)
        hits = service.search_in_book("lib", 1, "dragon")

        assert mock_client.fetch_epub_bytes.call_count == 1
        assert [(h.chapter_title, h.chapter_path) for h in hits] == [
            ("Chapter One", "OEBPS/text/ch01.html"),
            ("ch03.html", "OEBPS/text/ch03.html"),
        ]
        assert "Dragon flew away" in hits[1].snippet

    def test_missing_spine_document_is_skipped(self, make_epub, sample_epub_files):
        """Test qu'un chapitre du spine absent de l'archive est traité comme vide."""
        del sample_epub_files["OEBPS/text/ch01.html"]
        client = MagicMock()
        client.fetch_epub_bytes.return_value = make_epub(sample_epub_files)

        hits = BookService(client).search_in_book("lib", 1, "dragon")
        assert [h.chapter_path for h in hits] == ["OEBPS/text/ch03.html"]


class TestEpubFiles:
    """Tests pour l'accès aux fichiers bruts."""

    def test_list_epub_files(self, mock_client):
        """Test de la liste des fichiers de l'archive."""
        files = BookService(mock_client).list_epub_files("lib", 1)
        assert "OEBPS/images/" in files
        assert "OEBPS/styles/book.css" in files

    def test_get_epub_file_binary(self, mock_client):
        """Test de la lecture binaire d'un fichier de l'archive."""
        data = BookService(mock_client).get_epub_file(
            "lib", 1, "OEBPS/styles/book.css", binary=True
        )
        assert data == b"p { margin: 0; }"


class TestLibraries:
    """Tests pour les opérations déléguées au client."""

    def test_search_books_across_libraries(self):
        """Test de la recherche de livres dans toutes les bibliothèques."""
        client = MagicMock()
        client.get_libraries.return_value = [
            LibraryInfo("a", "Library A", 1),
            LibraryInfo("b", "Library B", 1),
        ]
        client.get_books.side_effect = [
            ([{"id": 1, "title": "One", "authors": ["X"]}], 1),
            ([{"application_id": 2, "title": "Two", "authors": ["Y"]}], 1),
        ]

        results = BookService(client).search_books("dragon")

        assert [r.to_dict() for r in results] == [
            {"libraryId": "a", "libraryName": "Library A", "bookId": 1, "title": "One",
             "authors": ["X"]},
            {"libraryId": "b", "libraryName": "Library B", "bookId": 2, "title": "Two",
             "authors": ["Y"]},
        ]
        client.get_books.assert_any_call("a", 100, 0, "dragon")

    def test_list_books(self):
        """Test de la liste paginée des livres d'une bibliothèque."""
        client = MagicMock()
        client.get_books.return_value = ([{"id": 3, "title": "Three", "authors": []}], 10)
        result = BookService(client).list_books("lib", 1, 2)
        assert result["total"] == 10
        assert result["books"][0].to_dict() == {"id": 3, "title": "Three", "authors": []}
        client.get_books.assert_called_once_with("lib", 1, 2)
