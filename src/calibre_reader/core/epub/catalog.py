"""
Construction de la liste des chapitres.

Le spine fait foi pour l'ordre; la table des matières ne fournit que les
titres.
"""

from typing import Dict, List

from ..models import Chapter, TocEntry
from .archive import EpubArchive
from .navigation import resolve_toc
from .package import read_package


def build_chapters(spine: List[str], toc: List[TocEntry]) -> List[Chapter]:
    """
    Associe chaque chemin du spine à son titre.

    Sans entrée de table des matières, le titre est le dernier segment du
    chemin. Un chemin répété dans le spine donne plusieurs chapitres.
    """
    titles: Dict[str, str] = {}
    for entry in toc:
        titles.setdefault(entry.path, entry.title)

    return [Chapter(title=titles.get(path, path.split("/")[-1]), path=path) for path in spine]


def list_chapters(archive: EpubArchive) -> List[Chapter]:
    """Liste les chapitres d'une archive ouverte, dans l'ordre de lecture."""
    package = read_package(archive)
    return build_chapters(package.spine, resolve_toc(archive, package))
