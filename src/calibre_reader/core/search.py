"""
Recherche plein texte dans un livre.

Chaque chapitre est converti en Markdown puis parcouru à la recherche du
texte littéral demandé, sans tenir compte de la casse.
"""

from typing import Callable, Iterable, List

from ..config import MAX_SEARCH_HITS, SNIPPET_WINDOW
from .models import Chapter, SearchHit
from .text_utils import html_to_markdown


def fold_case(text: str) -> str:
    """
    Passe le texte en minuscules sans changer sa longueur.

    Certains caractères s'étendent en minuscules ("İ" donne "i" + point
    combinant): seul le premier caractère est gardé, pour que les positions
    trouvées restent valides dans le texte d'origine.
    """
    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered
    return "".join(c.lower()[:1] or c for c in text)


def find_occurrences(text: str, query: str) -> List[int]:
    """
    Positions de toutes les occurrences de query dans text (casse ignorée).

    Le curseur avance d'un seul caractère après chaque début de
    correspondance: les occurrences qui se chevauchent sont toutes
    rapportées ("aa" dans "aaa" donne 0 et 1).
    """
    if not query:
        return []
    haystack = fold_case(text)
    needle = fold_case(query)
    positions = []
    index = haystack.find(needle)
    while index != -1:
        positions.append(index)
        index = haystack.find(needle, index + 1)
    return positions


def make_snippet(text: str, index: int, query_length: int, window: int = SNIPPET_WINDOW) -> str:
    start = max(0, index - window)
    end = min(len(text), index + query_length + window)
    return text[start:end]


def search_chapters(
    chapters: Iterable[Chapter],
    load_markup: Callable[[str], str],
    query: str,
    limit: int = MAX_SEARCH_HITS,
    window: int = SNIPPET_WINDOW,
) -> List[SearchHit]:
    """
    Recherche query dans chaque chapitre, dans l'ordre du catalogue.

    Args:
        chapters: Chapitres dans l'ordre de lecture
        load_markup: Fonction chemin -> XHTML brut du chapitre
        query: Texte littéral recherché
        limit: Nombre maximal de résultats pour tout le livre
        window: Nombre de caractères de contexte de chaque côté

    Returns:
        Liste de SearchHit, au plus `limit` éléments
    """
    hits: List[SearchHit] = []
    if not query or limit <= 0:
        return hits

    for chapter in chapters:
        text = html_to_markdown(load_markup(chapter.path))
        for index in find_occurrences(text, query):
            hits.append(
                SearchHit(
                    chapter_title=chapter.title,
                    chapter_path=chapter.path,
                    markdown_offset=index,
                    snippet=make_snippet(text, index, len(query), window),
                )
            )
            if len(hits) >= limit:
                return hits
    return hits
