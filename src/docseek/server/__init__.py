"""MCP server for docseek."""

from docseek.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
