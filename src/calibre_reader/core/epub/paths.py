"""
Normalisation des chemins internes à l'archive EPUB.

Les chemins canoniques sont relatifs à la racine de l'archive, séparés
par '/', sans segments '.' ni '..'.
"""

from urllib.parse import unquote


def normalize_path(path: str) -> str:
    """
    Résout les segments '.' et '..' d'un chemin.

    Un '..' en trop (au-delà de la racine) est ignoré, jamais une erreur.
    """
    stack = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if stack:
                stack.pop()
        else:
            stack.append(part)
    return "/".join(stack)


def resolve_path(base_dir: str, href: str) -> str:
    """Résout un href relatif au répertoire base_dir."""
    return normalize_path(base_dir + href)


def dirname(path: str) -> str:
    """Retourne le répertoire d'un chemin avec '/' final, ou '' à la racine."""
    if "/" not in path:
        return ""
    return path[: path.rindex("/") + 1]


def strip_fragment(href: str) -> str:
    """Supprime l'identifiant de fragment ('#...') d'un href."""
    return href.split("#", 1)[0]


def decode_href(href: str) -> str:
    """Décode les séquences %XX; en cas d'échec, le href brut est conservé."""
    try:
        return unquote(href, errors="strict")
    except UnicodeDecodeError:
        return href
