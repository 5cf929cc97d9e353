# calibre_reader/src/calibre_reader/core/epub/archive.py
"""
Accès bas niveau à l'archive zip d'un EPUB.

Responsabilité unique: ouvrir un buffer d'octets, lister les entrées et
lire leur contenu (texte ou binaire). L'archive doit être fermée une seule
fois par ouverture, y compris en cas d'exception: utiliser `with`.
"""

import zipfile
import zlib
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, List, Optional

from ..errors import ArchiveError, EntryError

TEXT_ENCODING = "utf-8-sig"


@dataclass(frozen=True)
class ArchiveEntry:
    filename: str
    is_dir: bool


class EpubArchive:
    """Archive EPUB ouverte en mémoire."""

    def __init__(self, zf: zipfile.ZipFile):
        self._zf = zf
        self._closed = False
        # La liste des entrées est figée pour toute la durée de vie du handle
        self._entries = [ArchiveEntry(info.filename, info.is_dir()) for info in zf.infolist()]
        self._by_name: Dict[str, ArchiveEntry] = {}
        for entry in self._entries:
            self._by_name.setdefault(entry.filename, entry)

    @classmethod
    def open(cls, data: bytes) -> "EpubArchive":
        """
        Ouvre une archive depuis un buffer d'octets.

        Raises:
            ArchiveError: si le buffer n'est pas une archive zip valide
        """
        try:
            zf = zipfile.ZipFile(BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, TypeError) as e:
            raise ArchiveError(f"Not a valid EPUB archive: {e}") from e
        return cls(zf)

    def __enter__(self) -> "EpubArchive":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if not self._closed:
            self._closed = True
            self._zf.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def entries(self) -> List[ArchiveEntry]:
        return list(self._entries)

    def filenames(self) -> List[str]:
        return [e.filename for e in self._entries]

    def find(self, path: str) -> Optional[ArchiveEntry]:
        return self._by_name.get(path)

    def has_file(self, path: str) -> bool:
        entry = self.find(path)
        return entry is not None and not entry.is_dir

    def read_bytes(self, path: str) -> bytes:
        """
        Lit le contenu binaire d'une entrée.

        Raises:
            EntryError: entrée absente, répertoire, ou lecture impossible
        """
        entry = self.find(path)
        if entry is None or entry.is_dir:
            raise EntryError(f"File {path} not found or is a directory in EPUB")
        try:
            return self._zf.read(entry.filename)
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, OSError) as e:
            raise EntryError(f"Could not read {path} from EPUB: {e}") from e

    def read_text(self, path: str) -> str:
        """Lit une entrée et la décode en UTF-8, BOM retiré (octets invalides remplacés)."""
        return self.read_bytes(path).decode(TEXT_ENCODING, errors="replace")
