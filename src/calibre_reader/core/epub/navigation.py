# calibre_reader/src/calibre_reader/core/epub/navigation.py
"""
Résolution de la table des matières d'un EPUB.

Deux stratégies, essayées dans l'ordre (la première non vide l'emporte):
1. Document NCX (EPUB 2, media-type application/x-dtbncx+xml)
2. Document de navigation EPUB 3 (propriété "nav" dans le manifeste)

La table est une liste à plat: l'imbrication est perdue et seule la
première entrée pour un chemin donné est conservée. Une table vide n'est
pas une erreur.
"""

import re
from typing import Callable, List, Optional

from ..errors import EntryError
from ..models import ManifestItem, PackageDocument, TocEntry
from .archive import EpubArchive
from .paths import decode_href, dirname, resolve_path, strip_fragment
from .scanner import clean_label

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
NAV_PROPERTY = "nav"

NAV_POINT_RE = re.compile(
    r"<navPoint\b[^>]*>[\s\S]*?<navLabel\b[^>]*>[\s\S]*?<text\b[^>]*>([\s\S]*?)</text>"
    r"[\s\S]*?</navLabel>[\s\S]*?<content\b[^>]*?\bsrc\s*=\s*(?:\"([^\"]+)\"|'([^']+)')",
    re.IGNORECASE,
)
NAV_LINK_RE = re.compile(
    r"<a\b[^>]*?\bhref\s*=\s*(?:\"([^\"]+)\"|'([^']+)')[^>]*>([\s\S]*?)</a>",
    re.IGNORECASE,
)


def _add_entry(toc: List[TocEntry], seen: set, nav_dir: str, href: str, label: str):
    href = strip_fragment(href)
    if not href:
        return
    path = resolve_path(nav_dir, decode_href(href))
    if path not in seen:
        seen.add(path)
        toc.append(TocEntry(title=label, path=path))


def _read_nav_document(archive: EpubArchive, item: Optional[ManifestItem]) -> Optional[str]:
    if item is None or not archive.has_file(item.path):
        return None
    try:
        return archive.read_text(item.path)
    except EntryError:
        return None


def parse_ncx(ncx_xml: str, ncx_dir: str) -> List[TocEntry]:
    """Extrait les navPoint (libellé + content src) d'un document NCX."""
    toc: List[TocEntry] = []
    seen: set = set()
    for match in NAV_POINT_RE.finditer(ncx_xml):
        src = match.group(2) or match.group(3)
        _add_entry(toc, seen, ncx_dir, src, clean_label(match.group(1)))
    return toc


def parse_nav(nav_xml: str, nav_dir: str) -> List[TocEntry]:
    """Extrait les liens <a href> d'un document de navigation EPUB 3."""
    toc: List[TocEntry] = []
    seen: set = set()
    for match in NAV_LINK_RE.finditer(nav_xml):
        href = match.group(1) or match.group(2)
        _add_entry(toc, seen, nav_dir, href, clean_label(match.group(3)))
    return toc


def _toc_from_ncx(archive: EpubArchive, package: PackageDocument) -> List[TocEntry]:
    """Stratégie 1: document NCX."""
    item = next(
        (i for i in package.manifest.values() if (i.media_type or "").lower() == NCX_MEDIA_TYPE),
        None,
    )
    ncx_xml = _read_nav_document(archive, item)
    if ncx_xml is None:
        return []
    return parse_ncx(ncx_xml, dirname(item.path))


def _toc_from_nav(archive: EpubArchive, package: PackageDocument) -> List[TocEntry]:
    """Stratégie 2: document de navigation EPUB 3."""
    item = next((i for i in package.manifest.values() if i.has_property(NAV_PROPERTY)), None)
    nav_xml = _read_nav_document(archive, item)
    if nav_xml is None:
        return []
    return parse_nav(nav_xml, dirname(item.path))


TOC_STRATEGIES: List[Callable[[EpubArchive, PackageDocument], List[TocEntry]]] = [
    _toc_from_ncx,
    _toc_from_nav,
]


def resolve_toc(archive: EpubArchive, package: PackageDocument) -> List[TocEntry]:
    """
    Construit la table des matières en appliquant les stratégies en cascade.

    Args:
        archive: Archive EPUB ouverte
        package: Document OPF déjà lu

    Returns:
        Liste de TocEntry, éventuellement vide
    """
    for strategy in TOC_STRATEGIES:
        toc = strategy(archive, package)
        if toc:
            return toc
    return []
