"""
Module Server - Adaptateur MCP (Model Context Protocol).

Expose le BookService sous forme d'outils et de prompts MCP sur stdio.
"""

from .app import create_server, serve
from .tools import call_tool, tool_definitions

__all__ = [
    "call_tool",
    "create_server",
    "serve",
    "tool_definitions",
]
