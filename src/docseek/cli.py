"""CLI entry point for docseek."""

import argparse
import json
import logging
import sys
from pathlib import Path

from docseek.backend import model_backend
from docseek.config import Settings, load_settings
from docseek.errors import DocseekError
from docseek.pipeline import Engine, inspect_index

logger = logging.getLogger(__name__)


def index(settings: Settings, root: str, reset: bool = False) -> None:
    """Index a folder (or single file) into the configured index and store.

    Args:
        settings: Resolved settings
        root: Folder or file to index
        reset: Delete the existing index and store first
    """
    source = Path(root)
    if not source.exists():
        logger.error(f"Source not found: {root}")
        sys.exit(1)

    with model_backend():
        with Engine.from_settings(settings, with_planner=False) as engine:
            logger.info(f"Loading embedding model {settings.embed_model}...")
            stats = engine.index(source, reset=reset)
            report = engine.check_consistency()

    logger.info("")
    logger.info(
        f"Indexed {stats.chunks_indexed} chunks from {stats.files_indexed} files "
        f"-> {settings.index_path} ({report.index_size} vectors total)"
    )
    if stats.skipped:
        logger.info(f"Skipped {len(stats.skipped)} item(s):")
        for reason in stats.skipped:
            logger.info(f"  {reason}")


def query(settings: Settings, text: str, as_json: bool = False, plan: bool = True) -> None:
    """Run a query and print the plan and hits.

    Args:
        settings: Resolved settings
        text: Natural-language query
        as_json: Print one JSON document instead of text
        plan: Compile a plan with the instruct model (otherwise semantic only)
    """
    if not Path(settings.sqlite_path).exists():
        logger.error(f"Index not found: {settings.sqlite_path} (run `docseek index` first)")
        sys.exit(1)

    with model_backend():
        with Engine.from_settings(settings, with_planner=plan) as engine:
            result = engine.query(text)

    if as_json:
        print(
            json.dumps(
                {
                    "plan": result.plan.to_dict(),
                    "hits": [hit.to_dict() for hit in result.hits],
                },
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    print("Plan:")
    print(f"  filters={' '.join(result.plan.filters)}")
    print(f"  regex={' '.join(result.plan.regex)}")
    print()
    for hit in result.hits:
        print(f"{hit.file}:{hit.ls}-{hit.le}")
        print(hit.snippet)
        print("---")
    if not result.hits:
        print(f"No results found for: {text}")


def info(settings: Settings) -> None:
    """Show index metadata and check index/store consistency."""
    sqlite_path = Path(settings.sqlite_path)
    if not sqlite_path.exists():
        logger.error(f"Index not found: {sqlite_path}")
        sys.exit(1)

    metadata, files, report = inspect_index(settings)

    print(f"Index: {settings.index_path}")
    print(f"Store: {sqlite_path} ({sqlite_path.stat().st_size / 1024:.1f} KB)")
    print(f"")
    print(f"Metadata:")
    for key, value in metadata.items():
        print(f"  {key}: {value}")
    print(f"")
    print(f"Contents:")
    print(f"  Files: {len(files)}")
    print(f"  Vectors: {report.index_size}")
    print(f"  Chunk rows: {report.store_count} (max id {report.max_id})")
    print(f"")
    if report.consistent:
        print("Consistency: OK")
    else:
        print("Consistency: MISMATCH")
        print(f"  Rows without a vector: {report.orphaned_rows}")
        print(f"  Vectors without a row: {report.missing_rows}")
        print("  Re-index with --reset to rebuild both.")


def serve(settings: Settings) -> None:
    """Start an MCP server over stdio for the configured index."""
    # Import here to avoid loading MCP unless needed
    from docseek.server import create_mcp_server

    with model_backend():
        mcp = create_mcp_server(settings)
        logger.info(f"Serving {settings.index_path} via stdio")
        mcp.run(transport="stdio")


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sqlite", dest="sqlite_path", help="Chunk metadata database path")
    parser.add_argument("--index", dest="index_path", help="Vector index file path")
    parser.add_argument("--backend", dest="index_backend", choices=["hnsw", "flat"])
    parser.add_argument("--embed-model", help="sentence-transformers model name")
    parser.add_argument("--instruct-model", help="Causal LM used for query planning")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="docseek",
        description="docseek - local hybrid (semantic + keyword) search over text files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # index command
    index_parser = subparsers.add_parser("index", help="Index a folder or file")
    index_parser.add_argument("root", help="Folder or file to index")
    index_parser.add_argument("--chunk-size", type=int, help="Lines per chunk (default: 150)")
    index_parser.add_argument("--chunk-overlap", type=int, help="Lines shared by neighbouring chunks (default: 20)")
    index_parser.add_argument("--reset", action="store_true", help="Delete existing index and store first")
    _add_settings_arguments(index_parser)

    # query command
    query_parser = subparsers.add_parser("query", help="Search the index")
    query_parser.add_argument("query", help="Natural-language query")
    query_parser.add_argument("--k", type=int, help="Semantic recall width (default: 80)")
    query_parser.add_argument("--max-hits", type=int, help="Maximum results (default: 20)")
    query_parser.add_argument("--json", action="store_true", help="Print JSON")
    query_parser.add_argument("--no-plan", action="store_true", help="Skip the query planner")
    _add_settings_arguments(query_parser)

    # info command
    info_parser = subparsers.add_parser("info", help="Show index information and consistency")
    _add_settings_arguments(info_parser)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start MCP server over stdio")
    _add_settings_arguments(serve_parser)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    overrides = {
        key: value
        for key, value in vars(args).items()
        if key in {"sqlite_path", "index_path", "index_backend", "embed_model",
                   "instruct_model", "chunk_size", "chunk_overlap", "k", "max_hits"}
    }

    try:
        settings = load_settings(**overrides)
        if args.command == "index":
            index(settings, args.root, reset=args.reset)
        elif args.command == "query":
            query(settings, args.query, as_json=args.json, plan=not args.no_plan)
        elif args.command == "info":
            info(settings)
        elif args.command == "serve":
            serve(settings)
    except DocseekError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
