"""
Utilitaires pour les images (couvertures, images de l'EPUB).
"""

import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/png"


def detect_image_mime(data: bytes, default: str = DEFAULT_IMAGE_MIME) -> str:
    """Détermine le type MIME d'une image à partir de son contenu."""
    try:
        with Image.open(BytesIO(data)) as pil:
            fmt = pil.format
    except (UnidentifiedImageError, OSError) as e:
        logger.debug("Could not identify image data: %s", e)
        return default
    return Image.MIME.get(fmt, default) if fmt else default


def mime_from_extension(path: str) -> str:
    """Type MIME d'une image d'après l'extension du fichier."""
    ext = path.rsplit(".", 1)[-1].lower()
    return "image/jpeg" if ext == "jpg" else f"image/{ext}"
