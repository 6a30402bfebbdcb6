"""CLI entry point — Typer app for tutor-rag commands.

Usage:
    tutor-rag ingest notes/biology.txt --user tutor-1
    tutor-rag query "what produces energy in a cell"
    tutor-rag status
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="tutor-rag",
    help="Tutor knowledge base — ingest documents and query them.",
    no_args_is_help=True,
)

console = Console()

_INGEST_PATH = typer.Argument(..., help="Path to a UTF-8 text file to ingest")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def ingest(
    path: Annotated[Path, _INGEST_PATH],
    user: str = typer.Option(..., "--user", "-u", help="Uploader id"),
    file_name: str | None = typer.Option(
        None, "--file-name", "-f", help="Display name (defaults to the file name)",
    ),
    document_id: str | None = typer.Option(
        None, "--document-id", "-d", help="Attach chunks to an existing document",
    ),
) -> None:
    """Ingest a text document into the vector store."""
    from tutor_rag.config import load_settings
    from tutor_rag.exceptions import RAGError
    from tutor_rag.pipeline.factory import build_ingest_pipeline

    settings = load_settings()
    pipeline = build_ingest_pipeline(settings)

    content = path.read_text(encoding="utf-8")
    try:
        report = asyncio.run(pipeline.ingest(
            content,
            file_name=file_name or path.name,
            uploader_id=user,
            document_id=document_id,
        ))
    except RAGError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if settings.vectorstore.backend == "faiss":
        pipeline.vector_store.save(settings.vectorstore.path)

    console.print(f"\n[bold green]Ingested:[/] {path.name}")
    console.print(f"  Document: {report.document_id}")
    console.print(f"  Chunks: {report.chunks_processed}")
    console.print(f"  Stored: {report.chunks_persisted}")
    console.print(f"  Tiers: {report.tier_counts}")
    console.print(f"  [dim]{report.elapsed_seconds:.1f}s[/]")

    for w in report.warnings:
        console.print(f"  [yellow]Warning:[/] {w}")


@app.command()
def query(
    text: str = typer.Argument(..., help="Search query"),
    count: int | None = typer.Option(
        None, "--count", "-k", help="Number of chunks to return",
    ),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Minimum similarity",
    ),
) -> None:
    """Retrieve the chunks most relevant to a query."""
    from tutor_rag.config import load_settings
    from tutor_rag.exceptions import InvalidQueryError
    from tutor_rag.pipeline.factory import build_query_pipeline

    settings = load_settings()
    pipeline = build_query_pipeline(settings)

    try:
        result = asyncio.run(pipeline.retrieve(
            text,
            match_count=count if count is not None else settings.retrieval.match_count,
            match_threshold=(
                threshold if threshold is not None else settings.retrieval.match_threshold
            ),
        ))
    except InvalidQueryError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if not result.matches:
        console.print("\n[yellow]No matching chunks.[/]")
        return

    table = Table(title=f"Results ({result.search_type.value})")
    table.add_column("#", style="cyan")
    table.add_column("Score")
    table.add_column("Document")
    table.add_column("Chunk")
    table.add_column("Text")

    for i, m in enumerate(result.matches, 1):
        table.add_row(
            str(i), f"{m.score:.3f}", m.document_id[:8], str(m.chunk_index),
            m.content[:80].replace("\n", " "),
        )

    console.print(table)
    console.print(f"\n[dim]Query embedding tier: {result.embedding_tier}[/]")


@app.command()
def status() -> None:
    """Show system status (embedding tiers, config, vector store)."""
    from tutor_rag import __version__
    from tutor_rag.config import load_settings
    from tutor_rag.embeddings.factory import available_providers
    from tutor_rag.vectorstore.factory import available_stores

    settings = load_settings()

    console.print(f"\n[bold green]tutor-knowledge-rag[/] v{__version__}\n")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Embedding providers", ", ".join(available_providers()))
    table.add_row("Configured tiers", " -> ".join(settings.embedding.tiers))
    table.add_row("Gateway key", "set" if settings.embedding.api_key else "[yellow]missing[/]")
    table.add_row("Dimension", str(settings.embedding.dimension))
    table.add_row(
        "Chunking",
        f"{settings.chunking.chunk_size} chars, {settings.chunking.overlap} overlap",
    )
    table.add_row("Vector stores", ", ".join(available_stores()))
    table.add_row("Active backend", settings.vectorstore.backend)

    console.print(table)


if __name__ == "__main__":
    app()
