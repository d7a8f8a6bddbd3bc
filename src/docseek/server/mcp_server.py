"""FastMCP server implementation for docseek."""

from mcp.server.fastmcp import FastMCP

from docseek.config import Settings
from docseek.pipeline import Engine


def create_mcp_server(settings: Settings) -> FastMCP:
    """Create an MCP server for one index/store pair.

    Design: 1 process = 1 index. Queries share the opened index and store
    read-only; do not index into the same files while serving.

    Args:
        settings: Resolved settings naming the index and store

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="docseek",
    )

    # Initialize engine (models loaded once per server)
    engine = Engine.from_settings(settings)

    @mcp.tool()
    def search(query: str, max_hits: int = 10) -> str:
        """Hybrid search across the indexed files.

        The query is turned into keyword/regex filters, then the closest
        chunks by meaning are narrowed with those filters. For example:
        "timeout errors in the connection code" finds chunks about
        connections that mention "timeout".

        Args:
            query: Natural language description of what you're looking for
            max_hits: Maximum number of results to return (default: 10)

        Returns:
            Ranked list of matching file ranges with context
        """
        result = engine.query(query, max_hits=max_hits)

        lines = [
            f"Plan: filters={result.plan.filters} regex={result.plan.regex}",
            "",
        ]
        if not result.hits:
            lines.append(f"No results found for: {query}")
            return "\n".join(lines)

        for i, hit in enumerate(result.hits, 1):
            lines.append(f"{i}. {hit.file}:{hit.ls}-{hit.le}")
            lines.append(hit.snippet.rstrip())
            lines.append("")

        return "\n".join(lines)

    @mcp.tool()
    def info() -> str:
        """Describe the index: model, size and index/store consistency.

        Returns:
            Summary of the served index
        """
        report = engine.check_consistency()
        model = engine.store.get_metadata("embedding_model") or "unknown"
        status = "consistent" if report.consistent else (
            f"inconsistent ({report.orphaned_rows} rows without vectors, "
            f"{report.missing_rows} vectors without rows)"
        )
        return (
            f"Embedding model: {model}\n"
            f"Files: {len(engine.store.files())}\n"
            f"Vectors: {report.index_size}\n"
            f"Status: {status}"
        )

    return mcp
