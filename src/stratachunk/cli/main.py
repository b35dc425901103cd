import contextlib
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..chunking.assurance import build_chunk_assurance, load_chunk_records
from ..chunking.engine import chunk as chunk_content
from ..chunking.errors import ChunkingError
from ..chunking.pieces import Piece
from ..chunking.records import format_chunks, to_text_chunks
from ..chunking.strategies import (
    DocumentFormat,
    list_strategies,
    resolve_format,
    resolve_strategy,
)
from ..core.config import SETTINGS, Settings
from ..core.logging import log, setup_logging
from ..loaders import load_text
from ..obs.events import EventEmitter

app = typer.Typer(add_completion=False, help="Stratachunk CLI")

OUTPUT_FORMATS = ("ndjson", "text", "table")


@app.callback()
def _init() -> None:
    setup_logging(SETTINGS.LOG_FORMAT, SETTINGS.LOG_LEVEL)  # type: ignore[arg-type]


def _fail(message: str) -> NoReturn:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _default_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")


def _render_table(chunks: List[Piece], console: Console) -> None:
    table = Table(title=f"{len(chunks)} chunks")
    table.add_column("Index", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Metadata")
    table.add_column("Preview")
    for piece in chunks:
        metadata = {
            k: v for k, v in piece.metadata.items() if k not in ("id", "index")
        }
        preview = piece.text[:60].replace("\n", "⏎")
        table.add_row(
            piece.metadata.get("index", ""),
            str(piece.size),
            json.dumps(metadata, ensure_ascii=False),
            preview,
        )
    console.print(table)


@app.command()
def version() -> None:
    from .. import __version__

    typer.echo(__version__)


@app.command()
def chunk(
    path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Markdown, HTML or text file"
    ),
    doc_format: Optional[str] = typer.Option(
        None, "--format", help="Document format: markdown|html|text (default: by suffix)"
    ),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", help="Boundary strategy (default: most structural)"
    ),
    max_chunk_size: Optional[int] = typer.Option(
        None, "--max-chunk-size", help="Maximum characters per chunk"
    ),
    max_overlap_size: Optional[int] = typer.Option(
        None, "--max-overlap-size", help="Maximum characters of overlap"
    ),
    output: str = typer.Option("ndjson", "--output", help="ndjson|text|table"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write to file instead of stdout"),
    config_file: Optional[str] = typer.Option(
        None, "--config", help="Config file (.stratachunk.yaml auto-discovered)"
    ),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Run id for events"),
    no_events: bool = typer.Option(False, "--no-events", help="Do not write events.ndjson"),
) -> None:
    """
    Chunk one document and write the chunks.

    Config precedence: config file < env vars < CLI flags
    """
    if output not in OUTPUT_FORMATS:
        _fail(f"Unknown output format {output!r} (expected one of: {', '.join(OUTPUT_FORMATS)})")

    settings = Settings.load_config(config_file)
    max_size = max_chunk_size if max_chunk_size is not None else settings.MAX_CHUNK_SIZE
    # An explicit overlap is validated as given; the configured one is capped to the chunk size
    overlap = (
        max_overlap_size
        if max_overlap_size is not None
        else min(settings.MAX_OVERLAP_SIZE, max_size)
    )

    try:
        content, detected = load_text(path, resolve_format(settings.DEFAULT_FORMAT))
        fmt = resolve_format(doc_format) if doc_format else detected
        resolved = resolve_strategy(fmt, strategy or settings.DEFAULT_STRATEGY)
    except ChunkingError as e:
        _fail(str(e))

    non_mergeable = (
        settings.NON_MERGEABLE_TYPES if fmt is DocumentFormat.MARKDOWN else None
    )
    run_id = run_id or _default_run_id()
    emitter = EventEmitter(
        run_id, log_dir=str(Path(settings.STRATACHUNK_WORKDIR) / "logs")
    )
    emit = settings.EMIT_EVENTS and not no_events

    with emitter if emit else contextlib.nullcontext(emitter):
        emitter.chunk_start(doc_id=path.name, strategy=resolved.value)
        try:
            chunks = chunk_content(
                content,
                resolved,
                max_size,
                overlap,
                non_mergeable_types=non_mergeable,
            )
        except ChunkingError as e:
            emitter.error(str(e), doc_id=path.name)
            log.error("cli.chunk.failed", path=str(path), error=str(e))
            _fail(str(e))
        emitter.chunk_complete(doc_id=path.name, chunks=len(chunks))

    with open(out, "w", encoding="utf-8") if out else contextlib.nullcontext(
        sys.stdout
    ) as stream:
        if output == "ndjson":
            for record in to_text_chunks(chunks):
                stream.write(json.dumps(record.model_dump(), ensure_ascii=False) + "\n")
        elif output == "text":
            stream.write(format_chunks(chunks, max_size, overlap) + "\n")
        else:
            _render_table(chunks, Console(file=stream))

    if out:
        typer.echo(f"✅ Wrote {len(chunks)} chunks to {out}", err=True)


@app.command()
def verify(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source document"),
    chunks_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Chunk records (NDJSON)"
    ),
    max_chunk_size: Optional[int] = typer.Option(
        None, "--max-chunk-size", help="Maximum characters per chunk"
    ),
    max_overlap_size: int = typer.Option(
        0, "--max-overlap-size", help="Overlap used when chunking (0 checks preservation)"
    ),
    config_file: Optional[str] = typer.Option(None, "--config", help="Config file"),
) -> None:
    """Check chunk records against their source document and print the report."""
    settings = Settings.load_config(config_file)
    max_size = max_chunk_size if max_chunk_size is not None else settings.MAX_CHUNK_SIZE

    content, _ = load_text(path)
    try:
        records = load_chunk_records(chunks_file)
    except json.JSONDecodeError as e:
        _fail(f"Invalid chunk records in {chunks_file}: {e}")

    report = build_chunk_assurance(content, records, max_size, max_overlap_size)
    typer.echo(json.dumps(report, indent=2))

    if report["status"] != "PASS":
        _fail(
            f"Verification failed: {report['breaches']['count']} oversize chunk(s), "
            f"preservation ok={report['preservation']['ok']}"
        )


@app.command()
def strategies(
    doc_format: Optional[str] = typer.Option(
        None, "--format", help="Only list strategies for this format"
    ),
) -> None:
    """List chunking strategies and the splitter cascade each one runs."""
    try:
        formats = [resolve_format(doc_format)] if doc_format else list(DocumentFormat)
    except ChunkingError as e:
        _fail(str(e))

    table = Table(title="Chunking strategies")
    table.add_column("Format")
    table.add_column("Strategy")
    table.add_column("Cascade")
    for fmt in formats:
        for member in list_strategies(fmt):
            cascade = " > ".join(splitter.name for splitter in member.cascade())
            table.add_row(fmt.value, member.value, cascade)
    Console().print(table)


@app.command()
def config(
    config_file: Optional[str] = typer.Option(None, "--config", help="Config file"),
) -> None:
    """Print the effective settings."""
    settings = Settings.load_config(config_file)
    for k, v in settings.model_dump().items():
        typer.echo(f"{k}={v}")


if __name__ == "__main__":
    app()
