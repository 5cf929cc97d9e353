"""
Module EPUB - Analyse structurelle des archives EPUB.

Ce module fournit l'accès à l'archive, la lecture du document OPF,
la résolution de la table des matières et la liste des chapitres.
"""

# Exports publics
from .archive import ArchiveEntry, EpubArchive
from .catalog import build_chapters, list_chapters
from .navigation import resolve_toc
from .package import read_package
from .paths import normalize_path, resolve_path

__all__ = [
    "ArchiveEntry",
    "EpubArchive",
    "build_chapters",
    "list_chapters",
    "normalize_path",
    "read_package",
    "resolve_path",
    "resolve_toc",
]
