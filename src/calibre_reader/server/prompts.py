"""
Prompts MCP exposés par le serveur.
"""

from typing import Dict, List, Optional

from mcp.shared.exceptions import McpError
from mcp.types import (
    INVALID_PARAMS,
    ErrorData,
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    TextContent,
)

ANALYZE_BOOK = "analyze_book"

ANALYZE_BOOK_TEMPLATE = """I want to investigate details in the book "{book_title}".

To do this effectively, please follow these steps:
1. Use 'search_books' to find the book and get its 'libraryId' and 'bookId'. Use Calibre's search syntax for better accuracy (e.g., 'author:"Author Name"' or 'title:"Book Title"').
2. Use 'list_chapters' to understand the structure of the book.
3. If you are looking for specific information (characters, events, etc.), use 'search_in_book' to find relevant snippets.
4. Once you identify relevant chapters or sections from the search results or the table of contents, use 'get_chapter_content_markdown' to read the full text.
5. If you need more content from a chapter, use the 'offset' parameter.

Please start by searching for the book."""


def prompt_definitions() -> List[Prompt]:
    return [
        Prompt(
            name=ANALYZE_BOOK,
            description="Guidance on how to investigate and analyze a book in the Calibre library.",
            arguments=[
                PromptArgument(
                    name="bookTitle",
                    description="The title of the book to analyze",
                    required=True,
                )
            ],
        )
    ]


def get_prompt(name: str, arguments: Optional[Dict[str, str]] = None) -> GetPromptResult:
    """
    Construit le prompt demandé.

    Raises:
        McpError: prompt inconnu (INVALID_PARAMS)
    """
    if name != ANALYZE_BOOK:
        raise McpError(ErrorData(code=INVALID_PARAMS, message=f"Unknown prompt: {name}"))

    book_title = (arguments or {}).get("bookTitle")
    return GetPromptResult(
        description=f"Analyze book: {book_title}",
        messages=[
            PromptMessage(
                role="user",
                content=TextContent(
                    type="text", text=ANALYZE_BOOK_TEMPLATE.format(book_title=book_title)
                ),
            )
        ],
    )
