# calibre_reader/src/calibre_reader/core/text_utils.py
"""
Utilitaires de conversion et de découpage du texte des chapitres.
"""

import re
from typing import Optional

from ..config import DEFAULT_CHUNK_LENGTH
from .models import TextChunk

BODY_RE = re.compile(r"<body[^>]*>([\s\S]*?)</body>", re.IGNORECASE)
SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")

HEADING_RE = re.compile(r"<h[1-6]\b[^>]*>(.*?)</h[1-6]>", re.IGNORECASE)
PARAGRAPH_RE = re.compile(r"<p\b[^>]*>(.*?)</p>", re.IGNORECASE)
BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)

# Conversions inline, appliquées dans cet ordre
INLINE_RULES = [
    (re.compile(r"<strong\b[^>]*>(.*?)</strong>", re.IGNORECASE), r"**\1**"),
    (re.compile(r"<b\b[^>]*>(.*?)</b>", re.IGNORECASE), r"**\1**"),
    (re.compile(r"<em\b[^>]*>(.*?)</em>", re.IGNORECASE), r"*\1*"),
    (re.compile(r"<i\b[^>]*>(.*?)</i>", re.IGNORECASE), r"*\1*"),
    (re.compile(r"<li\b[^>]*>(.*?)</li>", re.IGNORECASE), r"* \1\n"),
    (re.compile(r"<blockquote\b[^>]*>(.*?)</blockquote>", re.IGNORECASE), r"> \1\n"),
]

# Seules ces entités sont décodées; les autres restent telles quelles
ENTITIES = [
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
]

TRUNCATION_MARKER = "\n\n... (truncated, use offset {next_offset} to read more)"


def strip_tags(html_content: str) -> str:
    return TAG_RE.sub("", html_content)


def html_to_markdown(html_content: Optional[str]) -> str:
    """
    Convertit le XHTML d'un chapitre en texte Markdown lisible.

    Transformation pure et déterministe: même entrée, même sortie.

    Args:
        html_content: Contenu brut du chapitre

    Returns:
        Texte Markdown (chaîne vide si l'entrée est vide)
    """
    if not html_content:
        return ""

    text = html_content
    body = BODY_RE.search(text)
    if body:
        text = body.group(1)

    text = SCRIPT_RE.sub("", text)
    text = STYLE_RE.sub("", text)

    text = HEADING_RE.sub(lambda m: f"\n## {strip_tags(m.group(1))}\n", text)
    text = PARAGRAPH_RE.sub(lambda m: f"\n{strip_tags(m.group(1))}\n", text)
    text = BR_RE.sub("\n", text)
    for pattern, replacement in INLINE_RULES:
        text = pattern.sub(replacement, text)

    text = strip_tags(text)
    for entity, char in ENTITIES:
        text = text.replace(entity, char)

    return text.strip()


def read_chunk(text: str, offset: int = 0, length: int = DEFAULT_CHUNK_LENGTH) -> TextChunk:
    """
    Découpe une fenêtre [offset, offset + length) dans le texte.

    Si la fenêtre ne couvre pas la fin du texte, un marqueur indiquant le
    prochain offset à demander est ajouté au contenu. Les bornes hors du
    texte sont ramenées dans [0, len(text)] sans erreur.
    """
    offset = max(0, offset)
    length = max(0, length)
    end = offset + length
    content = text[offset:end]

    truncated = end < len(text)
    if truncated:
        content += TRUNCATION_MARKER.format(next_offset=end)

    return TextChunk(
        content=content,
        truncated=truncated,
        next_offset=end if truncated else None,
        total_length=len(text),
    )
