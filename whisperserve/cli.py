"""
whisperserve.cli - Typer CLI entry point.

Provides the serve, transcribe, models and check subcommands.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from whisperserve import __version__
from whisperserve.config import ServerConfig, load_config
from whisperserve.exceptions import ConfigError, DependencyError, WhisperServeError
from whisperserve.logging import configure_logging
from whisperserve.transcribe.engine import InferenceGate, WhisperCppEngine, load_engine
from whisperserve.transcribe.pipeline import TranscriptionPipeline
from whisperserve.utils import format_size, format_timestamp

app = typer.Typer(
    name="whisperserve",
    help="Transcription API powered by whisper.cpp.\n\n"
    "Accepts any audio ffmpeg can read and returns text with per-segment timing.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"whisperserve {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """whisperserve - whisper.cpp transcription service."""
    pass


def resolve_config(config_file: str | None, **overrides) -> ServerConfig:
    """Load config or exit with a readable error."""
    try:
        return load_config(Path(config_file) if config_file else None, **overrides)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def open_engine(config: ServerConfig) -> WhisperCppEngine:
    """Load the engine once, or exit. The caller closes it."""
    try:
        return load_engine(config.model_path, n_threads=config.threads)
    except WhisperServeError as e:
        console.print(f"[red]Error: {e}[/red]")
        if isinstance(e, DependencyError) and e.install_hint:
            console.print(f"[dim]{e.install_hint}[/dim]")
        raise typer.Exit(1)


def build_pipeline(engine: WhisperCppEngine, config: ServerConfig) -> TranscriptionPipeline:
    return TranscriptionPipeline(InferenceGate(engine, n_threads=config.threads))


@app.command("serve")
def serve(
    config_file: str | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    model: str | None = typer.Option(None, "--model", "-m", help="Path to ggml model file"),
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    threads: int | None = typer.Option(None, "--threads", "-t", help="Inference threads"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Load the model and serve the HTTP API."""
    config = resolve_config(
        config_file, model_path=model, host=host, port=port, threads=threads
    )
    configure_logging(verbose=verbose, level=config.log_level)

    import uvicorn

    from whisperserve.server import create_app

    engine = open_engine(config)
    console.print(f"[green]✓[/green] Model loaded from {config.model_path}")
    console.print(f"[cyan]Listening on http://{config.host}:{config.port}[/cyan]")

    try:
        uvicorn.run(
            create_app(config, build_pipeline(engine, config)),
            host=config.host,
            port=config.port,
            log_level=config.log_level,
        )
    finally:
        engine.close()


@app.command("transcribe")
def transcribe(
    audio_file: str = typer.Argument(..., help="Audio file to transcribe"),
    model: str | None = typer.Option(None, "--model", "-m", help="Path to ggml model file"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Language code (auto-detect if not set)"
    ),
    threads: int | None = typer.Option(None, "--threads", "-t", help="Inference threads"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write JSON result here"),
    config_file: str | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Transcribe a single audio file."""
    audio_path = Path(audio_file).expanduser()
    if not audio_path.is_file():
        console.print(f"[red]Error: Audio file not found: {audio_path}[/red]")
        raise typer.Exit(1)

    config = resolve_config(config_file, model_path=model, threads=threads)
    configure_logging(verbose=verbose, level="warning")

    engine = open_engine(config)
    try:
        result = build_pipeline(engine, config).transcribe_file(audio_path, language=language)
    except WhisperServeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        engine.close()

    if output:
        from whisperserve.io import write_transcript

        try:
            write_transcript(Path(output), result)
        except WhisperServeError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        console.print(
            f"[green]✓[/green] Wrote {len(result.segments)} segments to {output}"
        )
        return

    table = Table(title=audio_path.name)
    table.add_column("#", style="dim")
    table.add_column("Start", style="cyan")
    table.add_column("End", style="cyan")
    table.add_column("Text")

    for seg in result.segments:
        table.add_row(
            str(seg.id),
            format_timestamp(seg.start_time),
            format_timestamp(seg.end_time),
            seg.text.strip(),
        )

    console.print(table)


@app.command("models")
def models(
    model: str | None = typer.Option(None, "--model", "-m", help="Path to ggml model file"),
    config_file: str | None = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """List ggml model files next to the configured model."""
    from whisperserve.validation import list_models

    config = resolve_config(config_file, model_path=model)

    try:
        listing = list_models(config.model_path)
    except WhisperServeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Models in {listing['model_directory']}")
    table.add_column("Name", style="cyan")
    table.add_column("Size", style="green")
    table.add_column("Configured", style="yellow")

    for entry in listing["models"]:
        configured = Path(entry["path"]).resolve() == config.model_path.resolve()
        table.add_row(
            entry["name"],
            format_size(entry["size_bytes"]),
            "✓" if configured else "",
        )

    console.print(table)

    if not listing["configured_model_exists"]:
        console.print(
            f"[yellow]Warning: configured model {config.model_path} does not exist[/yellow]"
        )


@app.command("check")
def check(
    model: str | None = typer.Option(None, "--model", "-m", help="Path to ggml model file"),
    config_file: str | None = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Check ffmpeg and the model file."""
    from whisperserve.validation import check_ffmpeg, check_model_file

    config = resolve_config(config_file, model_path=model)
    failed = False

    try:
        ffmpeg = check_ffmpeg()
        console.print(f"[green]✓[/green] ffmpeg {ffmpeg['ffmpeg_version']} ({ffmpeg['ffmpeg_path']})")
    except DependencyError as e:
        console.print(f"[yellow]![/yellow] {e}")
        console.print("[dim]  Only 16kHz mono PCM WAV uploads will be accepted[/dim]")

    try:
        info = check_model_file(config.model_path)
        console.print(
            f"[green]✓[/green] Model {info['path']} ({format_size(info['size_bytes'])})"
        )
        if not info["ggml_name"]:
            console.print("[yellow]  Filename does not match the ggml-*.bin pattern[/yellow]")
    except WhisperServeError as e:
        console.print(f"[red]✗[/red] {e}")
        failed = True

    if failed:
        raise typer.Exit(1)
