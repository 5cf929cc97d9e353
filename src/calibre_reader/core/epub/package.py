# calibre_reader/src/calibre_reader/core/epub/package.py
"""
Lecture du document de package (OPF).

Responsabilité unique: suivre META-INF/container.xml jusqu'au fichier OPF,
puis construire le manifeste (id -> chemin canonique) et le spine
(ordre de lecture).
"""

import re
from typing import Dict, List

from ..errors import ContainerError, PackageError
from ..models import ManifestItem, PackageDocument
from .archive import EpubArchive
from .paths import decode_href, dirname, resolve_path
from .scanner import iter_tags

CONTAINER_PATH = "META-INF/container.xml"

FULL_PATH_RE = re.compile(r"""full-path\s*=\s*(?:"([^"]+)"|'([^']+)')""", re.IGNORECASE)


def find_opf_path(archive: EpubArchive) -> str:
    """
    Retourne le chemin du fichier OPF déclaré dans container.xml.

    Raises:
        ContainerError: container.xml absent, ou sans attribut full-path
    """
    if not archive.has_file(CONTAINER_PATH):
        raise ContainerError(f"EPUB missing {CONTAINER_PATH} or it is a directory")

    container_xml = archive.read_text(CONTAINER_PATH)
    match = FULL_PATH_RE.search(container_xml)
    if not match:
        raise ContainerError(f"Could not find root file in {CONTAINER_PATH}")
    return match.group(1) or match.group(2)


def parse_manifest(opf_xml: str, base_dir: str) -> Dict[str, ManifestItem]:
    """
    Construit la table id -> ManifestItem.

    L'ordre des attributs id/href est libre. Un id dupliqué écrase le
    précédent.
    """
    manifest: Dict[str, ManifestItem] = {}
    for attrs in iter_tags(opf_xml, "item"):
        item_id = attrs.get("id")
        href = attrs.get("href")
        if not item_id or not href:
            continue
        manifest[item_id] = ManifestItem(
            id=item_id,
            path=resolve_path(base_dir, decode_href(href)),
            media_type=attrs.get("media-type"),
            properties=attrs.get("properties"),
        )
    return manifest


def parse_spine(opf_xml: str, manifest: Dict[str, ManifestItem]) -> List[str]:
    """Résout les itemref du spine via le manifeste; les idref inconnus sont ignorés."""
    spine = []
    for attrs in iter_tags(opf_xml, "itemref"):
        item = manifest.get(attrs.get("idref", ""))
        if item is not None:
            spine.append(item.path)
    return spine


def read_package(archive: EpubArchive) -> PackageDocument:
    """
    Lit container.xml puis le document OPF d'une archive ouverte.

    Args:
        archive: Archive EPUB ouverte

    Returns:
        PackageDocument avec manifeste et spine

    Raises:
        ContainerError: container.xml manquant ou invalide
        PackageError: document OPF introuvable
    """
    opf_path = find_opf_path(archive)
    if not archive.has_file(opf_path):
        raise PackageError(f"Could not find OPF file at {opf_path} or it is a directory")

    opf_xml = archive.read_text(opf_path)
    base_dir = dirname(opf_path)
    manifest = parse_manifest(opf_xml, base_dir)

    return PackageDocument(
        opf_path=opf_path,
        base_dir=base_dir,
        manifest=manifest,
        spine=parse_spine(opf_xml, manifest),
    )
