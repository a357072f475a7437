"""
chunkscribe.cli - Typer CLI entry point.

This is the only place that turns errors into exit codes. Everything below
it raises ChunkscribeError subclasses.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from chunkscribe import __version__
from chunkscribe.config import (
    CONFIG_FILENAME,
    create_default_config,
    load_config,
    write_config,
)
from chunkscribe.exceptions import ChunkscribeError, TranscriptionError
from chunkscribe.export.transcript import JSON_FILENAME, load_transcript, write_outputs
from chunkscribe.logging import configure_logging
from chunkscribe.media.ffmpeg import FFmpegMedia
from chunkscribe.pipeline.driver import STOP_PROBE_FAILED, transcribe_file
from chunkscribe.transcribe.engine import create_transcriber_from_config
from chunkscribe.utils import format_duration, format_size
from chunkscribe.validation import run_preflight_checks

app = typer.Typer(
    name="chunkscribe",
    help="Chunked long-form audio transcription.\n\n"
    "Splits a recording into fixed-length chunks, transcribes each one, and "
    "merges the results into JSON, plain text, and timestamped text.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"chunkscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """chunkscribe - chunked long-form audio transcription."""
    configure_logging(verbose)


def print_preflight_errors(preflight: dict) -> None:
    for name, check in preflight["checks"].items():
        if "error" in check:
            console.print(f"[red]Error ({name}): {escape(check['error'])}[/red]")
            if check.get("install_hint"):
                console.print(f"[dim]  {check['install_hint']}[/dim]")
        elif check.get("sufficient") is False:
            console.print(
                f"[red]Error: Insufficient disk space. "
                f"Need ~{check['required_mb']}MB, have {check['available_mb']}MB[/red]"
            )


@app.command("init")
def init_config(
    path: str = typer.Option(".", "--path", "-d", help="Directory to write chunkscribe.yaml in"),
) -> None:
    """Write a chunkscribe.yaml with the default settings."""
    config_path = Path(path) / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_path)
    console.print(f"[green]✓[/green] Wrote {config_path}")


@app.command("transcribe")
def transcribe(
    input_file: str = typer.Argument(..., help="Audio file to transcribe"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Language code (default: ru)"
    ),
    segment_length: int | None = typer.Option(
        None, "--segment-length", "-s", help="Chunk length in seconds (default: 600)"
    ),
    backend: str | None = typer.Option(
        None, "--backend", "-b", help="Transcription backend (openai, faster, mlx)"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Backend model name"),
    output_dir: str | None = typer.Option(
        None, "--output-dir", "-o", help="Output directory (default: next to the input)"
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to chunkscribe.yaml"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Re-transcribe chunks that are already cached"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Do not read or write chunk cache"),
) -> None:
    """Split, transcribe, and merge one audio file."""
    overrides = {
        "language": language,
        "segment_length": segment_length,
        "backend": backend,
        "model": model,
        "output_dir": Path(output_dir) if output_dir else None,
        "use_cache": False if no_cache else None,
    }

    try:
        config = load_config(Path(config_file) if config_file else None, overrides)

        input_path = Path(input_file).expanduser()
        preflight = run_preflight_checks(config, input_path)
        if not preflight["passed"]:
            print_preflight_errors(preflight)
            raise typer.Exit(1)
        for warning in preflight["checks"].get("backend", {}).get("warnings", []):
            console.print(f"[yellow]Warning: {warning}[/yellow]")

        if config.config_path:
            console.print(f"[dim]Using {escape(str(config.config_path))}[/dim]")
        console.print(
            f"[cyan]Transcribing {input_path.name} ({format_size(input_path)}) "
            f"with {config.backend} "
            f"(language: {config.language})...[/cyan]\n"
        )

        run = transcribe_file(
            input_path=input_path,
            config=config,
            transcriber=create_transcriber_from_config(config),
            media=FFmpegMedia(),
            refresh=force,
            console=console,
        )

    except TranscriptionError as e:
        console.print(f"[red]Error during transcription: {escape(str(e))}[/red]")
        console.print("[dim]Finished chunks are cached; re-run the same command to resume.[/dim]")
        raise typer.Exit(1)
    except ChunkscribeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    result = run.result

    table = Table(title="Chunks")
    table.add_column("Chunk", style="cyan")
    table.add_column("Offset", style="green")
    table.add_column("Duration", style="green")
    table.add_column("Segments", style="green")
    table.add_column("Status", style="yellow")

    for outcome in result.outcomes:
        table.add_row(
            outcome.chunk.path.name,
            format_duration(outcome.chunk.offset),
            format_duration(outcome.chunk.duration),
            str(outcome.segment_count),
            "[dim]Cached[/dim]" if outcome.cached else "[green]✓ Transcribed[/green]",
        )

    console.print(table)

    if result.stop_reason == STOP_PROBE_FAILED:
        console.print(
            f"[yellow]Warning: stopped early, could not probe chunk duration: "
            f"{escape(result.stop_detail or '')}[/yellow]"
        )

    console.print(
        f"\n[green]✓[/green] {len(result.segments)} segment(s) from {len(result.outcomes)} "
        f"chunk(s) ({format_duration(result.total_duration)}), "
        f"transcribed {result.transcribed_count}, cached {result.cached_count}"
    )
    console.print(f"[dim]  {run.outputs.json_path}[/dim]")
    console.print(f"[dim]  {run.outputs.text_path}[/dim]")
    console.print(f"[dim]  {run.outputs.timestamped_path}[/dim]")


@app.command("render")
def render(
    output_dir: str = typer.Argument(..., help="Output directory containing combined.json"),
) -> None:
    """Rewrite the text outputs from an existing combined.json."""
    directory = Path(output_dir)

    try:
        segments = load_transcript(directory / JSON_FILENAME)
        outputs = write_outputs(segments, directory, include_json=False)
    except ChunkscribeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Rendered {len(segments)} segment(s)")
    console.print(f"[dim]  {outputs.text_path}[/dim]")
    console.print(f"[dim]  {outputs.timestamped_path}[/dim]")


@app.command("check")
def check(
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to chunkscribe.yaml"
    ),
    backend: str | None = typer.Option(None, "--backend", "-b", help="Backend to check"),
) -> None:
    """Check ffmpeg/ffprobe and the transcription backend."""
    try:
        config = load_config(Path(config_file) if config_file else None, {"backend": backend})
    except ChunkscribeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    preflight = run_preflight_checks(config)

    table = Table(title="Environment")
    table.add_column("Check", style="cyan")
    table.add_column("Result")

    if config.config_path:
        table.add_row("config", escape(str(config.config_path)))
    else:
        table.add_row("config", f"[dim]defaults (no {CONFIG_FILENAME})[/dim]")

    ffmpeg = preflight["checks"]["ffmpeg"]
    if "error" in ffmpeg:
        table.add_row("ffmpeg", f"[red]{ffmpeg['error']}[/red]")
    else:
        table.add_row("ffmpeg", f"[green]{ffmpeg['ffmpeg_version']}[/green]")
        table.add_row("ffprobe", f"[green]{ffmpeg['ffprobe_version']}[/green]")

    backend_check = preflight["checks"]["backend"]
    if "error" in backend_check:
        table.add_row(f"backend ({config.backend})", f"[red]{backend_check['error']}[/red]")
    else:
        status = "; ".join(backend_check["warnings"]) or "ready"
        style = "yellow" if backend_check["warnings"] else "green"
        table.add_row(f"backend ({config.backend})", f"[{style}]{status}[/{style}]")

    console.print(table)

    if not preflight["passed"]:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
