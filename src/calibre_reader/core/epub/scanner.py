"""
Scanner permissif de balises et d'attributs XML.

Pas de parseur DOM ici: les EPUB du commerce ne sont pas toujours bien
formés et un document légèrement invalide doit rester exploitable.
"""

import html
import re
from functools import lru_cache
from typing import Dict, Iterator, Pattern

ATTR_RE = re.compile(r"""([\w:.-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
TAG_STRIP_RE = re.compile(r"<[^>]+>")


@lru_cache(maxsize=None)
def _start_tag_re(name: str) -> Pattern[str]:
    # Préfixe de namespace toléré (opf:item, ncx:content...)
    return re.compile(r"<(?:[\w-]+:)?%s\b([^>]*)>" % re.escape(name), re.IGNORECASE)


def parse_attrs(raw: str) -> Dict[str, str]:
    """Extrait les attributs d'un fragment de balise, noms en minuscules."""
    attrs: Dict[str, str] = {}
    for match in ATTR_RE.finditer(raw):
        name = match.group(1).lower()
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attrs.setdefault(name, html.unescape(value))
    return attrs


def iter_tags(xml: str, name: str) -> Iterator[Dict[str, str]]:
    """Itère sur les attributs de chaque balise ouvrante `name`, dans l'ordre."""
    for match in _start_tag_re(name).finditer(xml):
        yield parse_attrs(match.group(1))


def strip_tags(fragment: str) -> str:
    return TAG_STRIP_RE.sub("", fragment)


def clean_label(fragment: str) -> str:
    """Texte d'un libellé de navigation: balises retirées, entités décodées."""
    return html.unescape(strip_tags(fragment)).strip()
