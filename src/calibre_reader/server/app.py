# calibre_reader/src/calibre_reader/server/app.py
"""
Serveur MCP sur stdin/stdout.

Relie les handlers du protocole (tools, prompts) au BookService. La sortie
standard est réservée au protocole: les logs vont sur stderr.
"""

import logging
from typing import Any, Dict, List

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import GetPromptResult, Prompt, Tool

from ..config import APP_NAME, APP_VERSION
from ..core.book_service import BookService
from .prompts import get_prompt, prompt_definitions
from .tools import Content, call_tool, tool_definitions

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Échec d'un outil, converti en résultat isError par le serveur MCP."""


def create_server(service: BookService) -> Server:
    """Construit le serveur MCP et enregistre ses handlers."""
    server = Server(APP_NAME)

    @server.list_tools()
    async def handle_list_tools() -> List[Tool]:
        logger.debug("ListTools requested")
        return tool_definitions()

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: Dict[str, Any] | None) -> List[Content]:
        result = call_tool(service, name, arguments)
        if result.isError:
            raise ToolCallFailed(result.content[0].text)
        return result.content

    @server.list_prompts()
    async def handle_list_prompts() -> List[Prompt]:
        logger.debug("ListPrompts requested")
        return prompt_definitions()

    @server.get_prompt()
    async def handle_get_prompt(name: str, arguments: Dict[str, str] | None) -> GetPromptResult:
        logger.debug("GetPrompt requested: %s %s", name, arguments)
        return get_prompt(name, arguments)

    return server


async def serve(service: BookService):
    """Lance le serveur MCP sur stdio jusqu'à la fermeture de l'entrée."""
    server = create_server(service)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("%s %s running on stdio", APP_NAME, APP_VERSION)
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=APP_NAME,
                server_version=APP_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )
