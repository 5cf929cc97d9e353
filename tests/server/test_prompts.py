"""
Tests pour le module server.prompts.
"""

import pytest
from mcp.shared.exceptions import McpError

from calibre_reader.server.prompts import get_prompt, prompt_definitions


def test_analyze_book_is_listed():
    """Test que le prompt analyze_book est déclaré avec son argument obligatoire."""
    prompts = prompt_definitions()
    assert [p.name for p in prompts] == ["analyze_book"]
    assert prompts[0].arguments[0].name == "bookTitle"
    assert prompts[0].arguments[0].required is True


def test_analyze_book_message():
    """Test que le message du prompt reprend le titre du livre."""
    result = get_prompt("analyze_book", {"bookTitle": "Dune"})
    assert result.description == "Analyze book: Dune"
    message = result.messages[0]
    assert message.role == "user"
    assert 'details in the book "Dune"' in message.content.text
    assert "search_in_book" in message.content.text


def test_unknown_prompt():
    """Test qu'un prompt inconnu lève une McpError."""
    with pytest.raises(McpError, match="Unknown prompt: summarize"):
        get_prompt("summarize", {})
