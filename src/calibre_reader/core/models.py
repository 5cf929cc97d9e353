# calibre_reader/src/calibre_reader/core/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ManifestItem:
    """Entrée du manifeste OPF."""

    id: str
    path: str
    media_type: str | None = None
    properties: str | None = None

    def has_property(self, name: str) -> bool:
        return name in (self.properties or "").split()


@dataclass
class PackageDocument:
    """Document OPF résolu: manifeste et ordre de lecture (spine)."""

    opf_path: str
    base_dir: str
    manifest: Dict[str, ManifestItem] = field(default_factory=dict)
    spine: List[str] = field(default_factory=list)


@dataclass
class TocEntry:
    title: str
    path: str


@dataclass
class Chapter:
    """Chapitre exposé aux appelants, dans l'ordre du spine."""

    title: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "path": self.path}


@dataclass
class SearchHit:
    """Occurrence trouvée par la recherche plein texte."""

    chapter_title: str
    chapter_path: str
    markdown_offset: int
    snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chapterTitle": self.chapter_title,
            "chapterPath": self.chapter_path,
            "markdownOffset": self.markdown_offset,
            "snippet": self.snippet,
        }


@dataclass
class TextChunk:
    """Fenêtre de texte renvoyée par la lecture par morceaux."""

    content: str
    truncated: bool
    next_offset: int | None
    total_length: int


@dataclass
class LibraryInfo:
    id: str
    name: str
    book_count: int | None = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.book_count is not None:
            data["bookCount"] = self.book_count
        return data


@dataclass
class BookSummary:
    """Résumé d'un livre tel qu'affiché dans les listes."""

    id: Any
    title: str | None = None
    authors: List[str] | None = field(default_factory=list)
    library_id: str | None = None
    library_name: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        if self.library_id is None:
            return {"id": self.id, "title": self.title, "authors": self.authors}
        return {
            "libraryId": self.library_id,
            "libraryName": self.library_name,
            "bookId": self.id,
            "title": self.title,
            "authors": self.authors,
        }
