"""Point d'entrée `python -m calibre_reader` et script `calibre-reader`."""

import sys


def cli() -> int:
    """Lance le serveur MCP et retourne un code de sortie entier."""
    from .main import main

    try:
        code = main()
    except SystemExit as se:
        return se.code if isinstance(se.code, int) else 1
    return int(code or 0)


if __name__ == "__main__":
    sys.exit(cli())
