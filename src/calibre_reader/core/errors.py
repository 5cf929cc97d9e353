"""
Hiérarchie d'exceptions de Calibre Reader.

Toutes les erreurs remontent jusqu'à l'adaptateur MCP qui les transforme
en résultat d'outil en échec.
"""


class CalibreReaderError(Exception):
    """Erreur de base du projet."""


class ArchiveError(CalibreReaderError):
    """Le flux d'octets n'est pas une archive zip valide."""


class ContainerError(CalibreReaderError):
    """META-INF/container.xml absent ou sans rootfile."""


class PackageError(CalibreReaderError):
    """Document OPF introuvable."""


class EntryError(CalibreReaderError):
    """Entrée absente de l'archive, répertoire, ou illisible."""


class UpstreamError(CalibreReaderError):
    """Le serveur Calibre n'a pas pu fournir la ressource demandée."""
