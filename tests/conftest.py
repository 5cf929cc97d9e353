# tests/conftest.py
"""
Configuration globale pour pytest.

Fournit des fixtures réutilisables pour tous les tests.
"""

import zipfile
from io import BytesIO
from typing import Dict, Union
from unittest.mock import MagicMock

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_XML = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>The Dragon Book</dc:title>
  </metadata>
  <manifest>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="ch1" href="text/ch01.html" media-type="application/xhtml+xml"/>
    <item href="text/ch02.html" id="ch2" media-type="application/xhtml+xml"/>
    <item id="ch3" href="text/ch03.html" media-type="application/xhtml+xml"/>
    <item id="css" href="styles/book.css" media-type="text/css"/>
  </manifest>
  <spine toc="ncx">
    <itemref idref="ch1"/>
    <itemref idref="ch2"/>
    <itemref idref="ch3"/>
  </spine>
</package>
"""

NCX_XML = """<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <docTitle><text>The Dragon Book</text></docTitle>
  <navMap>
    <navPoint id="np1" playOrder="1">
      <navLabel><text>Chapter One</text></navLabel>
      <content src="text/ch01.html"/>
    </navPoint>
    <navPoint id="np2" playOrder="2">
      <navLabel><text>Chapter Two</text></navLabel>
      <content src="text/ch02.html#start"/>
      <navPoint id="np2a" playOrder="3">
        <navLabel><text>Chapter Two, Part A</text></navLabel>
        <content src="text/ch02.html#part-a"/>
      </navPoint>
    </navPoint>
  </navMap>
</ncx>
"""

CHAPTER_1 = """<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Chapter One</title><style>p { color: red; }</style></head>
<body>
<h1>Chapter One</h1>
<p>It was a dark and stormy night.</p>
<p>The dragon slept under the mountain.</p>
</body>
</html>
"""

CHAPTER_2 = """<html><body>
<h2>Chapter Two</h2>
<p>Morning came &amp; the village woke.</p>
</body></html>
"""

CHAPTER_3 = """<html><body>
<p>Epilogue: the Dragon flew away.</p>
</body></html>
"""


def build_epub(files: Dict[str, Union[str, bytes]], directories=()) -> bytes:
    """Construit une archive EPUB en mémoire à partir d'un dict chemin -> contenu."""
    buf = BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        if "mimetype" not in files:
            zf.writestr("mimetype", "application/epub+zip")
        for name in directories:
            zf.writestr(zipfile.ZipInfo(name), "")
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


@pytest.fixture
def make_epub():
    """Retourne la fonction de construction d'EPUB en mémoire."""
    return build_epub


@pytest.fixture
def sample_epub_files() -> Dict[str, str]:
    """Fichiers d'un EPUB 2 complet avec table des matières NCX."""
    return {
        "META-INF/container.xml": CONTAINER_XML,
        "OEBPS/content.opf": OPF_XML,
        "OEBPS/toc.ncx": NCX_XML,
        "OEBPS/text/ch01.html": CHAPTER_1,
        "OEBPS/text/ch02.html": CHAPTER_2,
        "OEBPS/text/ch03.html": CHAPTER_3,
        "OEBPS/styles/book.css": "p { margin: 0; }",
    }


@pytest.fixture
def sample_epub_bytes(sample_epub_files) -> bytes:
    return build_epub(sample_epub_files, directories=["OEBPS/images/"])


@pytest.fixture
def mock_client(sample_epub_bytes):
    """Retourne un faux CalibreClient servant l'EPUB d'exemple."""
    client = MagicMock()
    client.fetch_epub_bytes.return_value = sample_epub_bytes
    return client
