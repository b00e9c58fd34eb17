"""Command-line interface for the Marvel GraphRAG system.

Entry point: `mgr` command (defined in pyproject.toml).
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from marvel_graphrag.config import Config

console = Console()

EXIT_WORDS = {"quit", "exit"}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    # The driver and HTTP client are chatty at INFO.
    for name in ("neo4j", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _print_response(response) -> None:
    """Render a QueryResponse on the console."""
    if response.error:
        console.print(response.error, style="red", markup=False)
        return

    console.print("[cyan]Generated Cypher query:[/cyan]")
    console.print(response.cypher, markup=False)
    console.print("[cyan]Results:[/cyan]")
    if response.execution_error:
        console.print(response.results, style="red", markup=False)
    else:
        console.print(response.results, markup=False)
    console.print("[green]Answer:[/green]")
    console.print(response.narration, markup=False)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Marvel Comics GraphRAG System."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config()


@main.command()
@click.pass_context
def schema(ctx: click.Context) -> None:
    """Create uniqueness constraints and show the current graph schema.

    Idempotent — safe to run repeatedly.
    """
    from marvel_graphrag.graph.schema import create_schema, introspect_schema
    from marvel_graphrag.graph.store import GraphStore, GraphStoreError

    config = ctx.obj["config"]
    store = GraphStore(config)
    try:
        console.print("[cyan]Creating schema...[/cyan]")
        stats = create_schema(store)
        console.print(f"  Constraints: {stats['constraints_created']} created, "
                      f"{stats['constraints_existing']} existing")

        summary = introspect_schema(store)
    except GraphStoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)
    finally:
        store.close()

    console.print(f"\n  Labels:             {', '.join(summary.labels) or '-'}")
    console.print(f"  Relationship types: {', '.join(summary.relationship_types) or '-'}")


@main.command()
@click.argument("data_dir", type=click.Path(exists=True, file_okay=False), required=False)
@click.option("--clear/--no-clear", default=True,
              help="Delete all existing graph data first (default: --clear).")
@click.pass_context
def ingest(ctx: click.Context, data_dir: str | None, clear: bool) -> None:
    """Load the Marvel CSV datasets into Neo4j.

    Walks DATA_DIR (default: the configured dataset directory) for CSV
    files and MERGE-ingests the recognized ones. Idempotent, safe
    to run repeatedly.
    """
    from pathlib import Path

    from marvel_graphrag.graph.ingest import GraphIngestor, graph_counts
    from marvel_graphrag.graph.store import GraphStore, GraphStoreError

    config = ctx.obj["config"]
    path = Path(data_dir) if data_dir else config.dataset_dir
    if not path.is_dir():
        console.print(f"[red]Error: Dataset directory not found at {path}[/red]")
        raise SystemExit(1)

    store = GraphStore(config)
    try:
        ingestor = GraphIngestor(config, store)
        stats = ingestor.ingest_directory(path, clear=clear)
        counts = graph_counts(store)
    except GraphStoreError as e:
        console.print(f"[red]Ingestion failed: {e}[/red]")
        raise SystemExit(1)
    finally:
        store.close()

    console.print("\n[green]Ingestion complete:[/green]")
    console.print(f"  Files loaded:     {stats.files_loaded}")
    console.print(f"  Files skipped:    {stats.files_skipped}")
    console.print(f"  Nodes merged:     {stats.nodes_merged}")
    console.print(f"  Rels merged:      {stats.relationships_merged}")
    console.print(f"  Rows skipped:     {stats.rows_skipped}")
    console.print(f"  Graph now holds {counts['nodes']} nodes, "
                  f"{counts['relationships']} relationships")

    if stats.errors:
        console.print(f"\n[yellow]Errors ({len(stats.errors)}):[/yellow]")
        for err in stats.errors[:20]:
            console.print(f"  - {err['file']}: {err['error']}", markup=False)
        if len(stats.errors) > 20:
            console.print(f"  ... and {len(stats.errors) - 20} more")


@main.command()
@click.argument("question")
@click.pass_context
def query(ctx: click.Context, question: str) -> None:
    """Answer a single question about the Marvel graph."""
    from marvel_graphrag.context import AppContext

    if not question.strip():
        console.print("[red]Error: question must not be empty[/red]")
        raise SystemExit(1)

    app_context = AppContext.from_config(ctx.obj["config"])
    try:
        response = app_context.engine.answer(question.strip())
    finally:
        app_context.close()

    _print_response(response)


@main.command()
@click.pass_context
def chat(ctx: click.Context) -> None:
    """Interactive question answering session. Type 'quit' to exit."""
    from marvel_graphrag.context import AppContext

    app_context = AppContext.from_config(ctx.obj["config"])

    console.print("[bold]Marvel Comics GraphRAG Chatbot[/bold]")
    console.print("Ask me about Marvel characters, their relationships, and comic appearances!")
    console.print("Type 'quit' to exit.\n")

    try:
        while True:
            try:
                question = console.input("[bold]You:[/bold] ").strip()
            except EOFError:
                break
            if not question:
                continue
            if question.lower() in EXIT_WORDS:
                break
            _print_response(app_context.engine.answer(question))
            console.print()
    finally:
        app_context.close()

    console.print("Goodbye!")


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Check Neo4j, the LLM server, and whether data is loaded."""
    from marvel_graphrag.graph.schema import data_present
    from marvel_graphrag.graph.store import GraphStore
    from marvel_graphrag.llm import OllamaLLM

    config = ctx.obj["config"]
    store = GraphStore(config)
    try:
        flags = {
            f"Neo4j ({config.neo4j_uri})": store.is_available(),
            f"LLM ({config.ollama_model} @ {config.ollama_host})": OllamaLLM(config).is_available(),
            "Data loaded": data_present(store),
        }
    finally:
        store.close()

    for name, ok in flags.items():
        mark = "[green]ok[/green]" if ok else "[red]unavailable[/red]"
        console.print(f"  {name:45s} {mark}")


@main.command()
@click.option("--host", type=str, default=None, help="Bind address (default: config web_host).")
@click.option("--port", type=int, default=None, help="Port (default: config web_port).")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the web UI."""
    import uvicorn

    from marvel_graphrag.context import AppContext
    from marvel_graphrag.web.app import create_app

    config = ctx.obj["config"]
    host = host or config.web_host
    port = port or config.web_port

    app_context = AppContext.from_config(config)
    console.print(f"[cyan]Open your browser at http://{host}:{port}[/cyan]")
    try:
        uvicorn.run(create_app(app_context), host=host, port=port, log_config=None)
    finally:
        app_context.close()


if __name__ == "__main__":
    main()
