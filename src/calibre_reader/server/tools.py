# calibre_reader/src/calibre_reader/server/tools.py
"""
Outils MCP: définitions et dispatch vers le BookService.

Toute exception levée par un outil est interceptée ici et renvoyée comme
résultat en échec (isError), le serveur continue de tourner.
"""

import base64
import json
import logging
from typing import Any, Callable, Dict, List, Union

from mcp.types import CallToolResult, ImageContent, TextContent, Tool

from ..config import DEFAULT_BOOK_LIMIT, DEFAULT_CHUNK_LENGTH, IMAGE_EXT
from ..core.book_service import BookService
from ..core.image_utils import detect_image_mime, mime_from_extension

logger = logging.getLogger(__name__)

Content = Union[TextContent, ImageContent]

_BOOK_PROPERTIES = {
    "libraryId": {"type": "string"},
    "bookId": {"type": "number"},
}


def _book_schema(**extra: Dict[str, Any]) -> Dict[str, Any]:
    properties = dict(_BOOK_PROPERTIES)
    properties.update(extra)
    required = ["libraryId", "bookId"] + [k for k in extra if k in ("path", "query")]
    return {"type": "object", "properties": properties, "required": required}


TOOLS = [
    Tool(
        name="list_libraries",
        description="List available Calibre libraries with their book counts.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="search_books",
        description=(
            "Search for books across all libraries. Supports Calibre syntax: "
            'author:"Name", title:"Name", series:"Name".'
        ),
        inputSchema={
            "type": "object",
            "properties": {"query": {"type": "string", "description": "Search query"}},
            "required": ["query"],
        },
    ),
    Tool(
        name="list_books",
        description="List books in a specific library",
        inputSchema={
            "type": "object",
            "properties": {
                "libraryId": {"type": "string", "description": "The ID of the library"},
                "limit": {"type": "number", "description": "Max books (default 100)"},
                "offset": {"type": "number", "description": "Offset (default 0)"},
            },
            "required": ["libraryId"],
        },
    ),
    Tool(
        name="list_chapters",
        description="List all chapters of a specific book.",
        inputSchema=_book_schema(),
    ),
    Tool(
        name="get_chapter_content",
        description="Get the HTML content of a specific chapter.",
        inputSchema=_book_schema(path={"type": "string"}),
    ),
    Tool(
        name="get_chapter_content_markdown",
        description="Get the content of a specific chapter converted to Markdown. RECOMMENDED.",
        inputSchema=_book_schema(
            path={"type": "string"},
            offset={"type": "number", "description": "Character offset"},
            length={"type": "number", "description": "Number of characters (default 30000)"},
        ),
    ),
    Tool(
        name="get_book_cover",
        description="Get the cover image of a book.",
        inputSchema=_book_schema(),
    ),
    Tool(
        name="search_in_book",
        description="Search for literal text within a book.",
        inputSchema=_book_schema(query={"type": "string"}),
    ),
    Tool(
        name="get_book_metadata",
        description="Get full metadata for a specific book.",
        inputSchema=_book_schema(),
    ),
    Tool(
        name="get_epub_file",
        description="Get a specific file from an EPUB (e.g., an image or HTML file).",
        inputSchema=_book_schema(
            path={"type": "string", "description": "Path to the file within the EPUB"}
        ),
    ),
    Tool(
        name="list_epub_files",
        description="List all files contained within an EPUB (e.g., HTML, CSS, images).",
        inputSchema=_book_schema(),
    ),
]


def tool_definitions() -> List[Tool]:
    return list(TOOLS)


# --- Helpers ---


def _json_text(data: Any) -> List[Content]:
    return [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False))]


def _image(data: bytes, mime_type: str) -> List[Content]:
    return [
        ImageContent(
            type="image", data=base64.b64encode(data).decode("ascii"), mimeType=mime_type
        )
    ]


def _arg(args: Dict[str, Any], name: str) -> Any:
    if args.get(name) is None:
        raise ValueError(f"Missing required argument: {name}")
    return args[name]


def _int_arg(args: Dict[str, Any], name: str, default: int) -> int:
    value = args.get(name)
    return default if value is None else int(value)


def _book_args(args: Dict[str, Any]):
    book_id = _arg(args, "bookId")
    # Les clients JSON peuvent envoyer 12.0 pour 12
    if isinstance(book_id, float) and book_id.is_integer():
        book_id = int(book_id)
    return str(_arg(args, "libraryId")), book_id


# --- Outils ---


def _list_libraries(service: BookService, args: Dict[str, Any]) -> List[Content]:
    return _json_text([lib.to_dict() for lib in service.list_libraries()])


def _search_books(service: BookService, args: Dict[str, Any]) -> List[Content]:
    return _json_text([b.to_dict() for b in service.search_books(_arg(args, "query"))])


def _list_books(service: BookService, args: Dict[str, Any]) -> List[Content]:
    result = service.list_books(
        str(_arg(args, "libraryId")),
        _int_arg(args, "limit", DEFAULT_BOOK_LIMIT),
        _int_arg(args, "offset", 0),
    )
    return _json_text({"books": [b.to_dict() for b in result["books"]], "total": result["total"]})


def _list_chapters(service: BookService, args: Dict[str, Any]) -> List[Content]:
    return _json_text([c.to_dict() for c in service.list_chapters(*_book_args(args))])


def _get_chapter_content(service: BookService, args: Dict[str, Any]) -> List[Content]:
    content = service.get_chapter_content(*_book_args(args), _arg(args, "path"))
    return [TextContent(type="text", text=content)]


def _get_chapter_content_markdown(service: BookService, args: Dict[str, Any]) -> List[Content]:
    chunk = service.read_chapter_markdown(
        *_book_args(args),
        _arg(args, "path"),
        offset=_int_arg(args, "offset", 0),
        length=_int_arg(args, "length", DEFAULT_CHUNK_LENGTH),
    )
    return [TextContent(type="text", text=chunk.content)]


def _get_book_cover(service: BookService, args: Dict[str, Any]) -> List[Content]:
    data = service.get_book_cover(*_book_args(args))
    return _image(data, detect_image_mime(data))


def _search_in_book(service: BookService, args: Dict[str, Any]) -> List[Content]:
    hits = service.search_in_book(*_book_args(args), _arg(args, "query"))
    return _json_text([h.to_dict() for h in hits])


def _get_book_metadata(service: BookService, args: Dict[str, Any]) -> List[Content]:
    return _json_text(service.get_book_metadata(*_book_args(args)))


def _get_epub_file(service: BookService, args: Dict[str, Any]) -> List[Content]:
    path = _arg(args, "path")
    if path.lower().endswith(IMAGE_EXT):
        data = service.get_epub_file(*_book_args(args), path, binary=True)
        return _image(data, mime_from_extension(path))
    return [TextContent(type="text", text=service.get_epub_file(*_book_args(args), path))]


def _list_epub_files(service: BookService, args: Dict[str, Any]) -> List[Content]:
    return _json_text(service.list_epub_files(*_book_args(args)))


HANDLERS: Dict[str, Callable[[BookService, Dict[str, Any]], List[Content]]] = {
    "list_libraries": _list_libraries,
    "search_books": _search_books,
    "list_books": _list_books,
    "list_chapters": _list_chapters,
    "get_chapter_content": _get_chapter_content,
    "get_chapter_content_markdown": _get_chapter_content_markdown,
    "get_book_cover": _get_book_cover,
    "search_in_book": _search_in_book,
    "get_book_metadata": _get_book_metadata,
    "get_epub_file": _get_epub_file,
    "list_epub_files": _list_epub_files,
}


def call_tool(service: BookService, name: str, arguments: Dict[str, Any] | None) -> CallToolResult:
    """
    Exécute un outil et renvoie son résultat.

    Args:
        service: Service de lecture des livres
        name: Nom de l'outil
        arguments: Arguments JSON de l'appel

    Returns:
        CallToolResult; isError=True si l'outil a échoué ou est inconnu
    """
    args = arguments or {}
    logger.debug("Tool call: %s %s", name, args)
    try:
        handler = HANDLERS.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")
        return CallToolResult(content=handler(service, args), isError=False)
    except Exception as e:
        logger.warning("Error in tool %s: %s", name, e, exc_info=True)
        return CallToolResult(content=[TextContent(type="text", text=f"Error: {e}")], isError=True)
