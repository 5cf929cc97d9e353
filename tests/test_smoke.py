from __future__ import annotations

from unittest.mock import patch


def test_import_package():
    """Test que le package et le serveur s'importent."""
    import calibre_reader  # noqa: F401
    import calibre_reader.server  # noqa: F401


def test_create_server():
    """Test que le serveur MCP se construit sans connexion à Calibre."""
    from calibre_reader.core.book_service import BookService
    from calibre_reader.server import create_server

    server = create_server(BookService(client=None))
    assert server.name == "calibre-reader"


@patch("calibre_reader.main.main", return_value=0)
def test_cli_entrypoint(mock_main):
    """Test que cli() retourne le code de sortie de main."""
    from calibre_reader.__main__ import cli

    code = cli()
    assert isinstance(code, int)
    assert code == 0
