"""
yttxt.cli - Typer CLI entry point.

Library code raises; this module turns errors into messages and exit codes.
Progress and errors go to stderr, transcript text to stdout.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from yttxt import __version__
from yttxt.clean import clean_transcript
from yttxt.config import (
    CONFIG_FILENAME,
    TranscriberConfig,
    create_default_config,
    load_config,
    write_config,
)
from yttxt.delivery import create_sink
from yttxt.exceptions import (
    ConfigError,
    DeliveryError,
    DependencyError,
    DownloadError,
    InputError,
    PipelineCancelled,
    PipelineError,
    ValidationError,
)
from yttxt.extract.audio import format_size
from yttxt.io import read_text, write_text
from yttxt.logging import configure_logging
from yttxt.utils import cleanup_directory
from yttxt.validation import (
    check_model_file,
    check_requirements,
    missing_requirements,
    required_tools,
    validate_input_file,
)

app = typer.Typer(
    name="yttxt",
    help="Spoken text from YouTube videos and local media files.\n\n"
    "Streams audio through yt-dlp, ffmpeg and whisper.cpp and writes the "
    "transcript next to you as yt<video-id>.txt or <file-name>.txt.",
    add_completion=False,
)
console = Console(highlight=False)
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"yttxt {__version__}")
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """yttxt - transcribe YouTube videos and media files with whisper.cpp."""
    configure_logging(verbose)


def _load_config(config_file: Path | None, overrides: dict[str, Any] | None = None) -> TranscriberConfig:
    try:
        return load_config(config_file, overrides=overrides)
    except ConfigError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _print_dependency_error(error: DependencyError) -> None:
    err_console.print(f"[red]{escape(error.message)}[/red]")
    if error.install_hint:
        err_console.print(escape(error.install_hint))


def pipeline_exit_code(returncode: int) -> int:
    """Shell-style exit status for a failed stage: 128+N when killed by signal N."""
    if returncode < 0:
        return 128 - returncode
    return returncode or 1


def _echo(text: str) -> None:
    console.out(text, end="", highlight=False)


def _deliver_or_exit(result: dict[str, Any], config: TranscriberConfig) -> None:
    from yttxt.driver import deliver_transcript

    try:
        delivered = deliver_transcript(result, config)
    except (DeliveryError, DownloadError) as e:
        err_console.print(f"[red]Delivery failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    if not delivered:
        err_console.print("[red]Delivery failed: sink rejected the note[/red]")
        raise typer.Exit(1)
    err_console.print(f"[green]✓[/green] Delivered to {config.delivery.sink}")


@app.command("transcribe")
def transcribe(
    source: str = typer.Argument(..., help="YouTube URL, video id or local media file"),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory for the transcript"
    ),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    model_path: Path | None = typer.Option(
        None, "--model-path", "-m", help="whisper.cpp ggml model (env: MODEL_PATH)"
    ),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Spoken language (env: WHISPER_LANG)"
    ),
    threads: int | None = typer.Option(
        None, "--threads", "-t", help="Worker threads (env: WHISPER_THREAD_COUNT)"
    ),
    remove_silence: bool = typer.Option(
        False, "--remove-silence", help="Strip silence before transcribing"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Re-transcribe even if cached"),
    deliver: bool = typer.Option(
        False, "--deliver", "-d", help="Clean the transcript and send it to the notes sink"
    ),
    sink: str | None = typer.Option(None, "--sink", help="Delivery sink: none, file, apple-notes"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Don't echo the transcript"),
) -> None:
    """Transcribe a YouTube video or a local media file."""
    overrides: dict[str, Any] = {
        "output_dir": output_dir,
        "model_path": model_path,
        "language": language,
        "thread_count": threads,
        "remove_silence": True if remove_silence else None,
        "delivery": {"enabled": True if deliver else None, "sink": sink},
    }
    config = _load_config(config_file, overrides)

    try:
        check_requirements(config)
    except DependencyError as e:
        _print_dependency_error(e)
        raise typer.Exit(1)

    model = check_model_file(config.model_path)
    if not model["exists"]:
        err_console.print(f"[yellow]Warning: model file not found: {model['path']}[/yellow]")

    from yttxt.driver import transcribe_source

    try:
        result = transcribe_source(
            source,
            config,
            echo=None if quiet else _echo,
            force=force,
            console=err_console,
        )
    except (InputError, DownloadError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except PipelineCancelled:
        err_console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(130)
    except PipelineError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(pipeline_exit_code(e.returncode))

    output = result["output"]
    if result["status"] == "cached":
        err_console.print(f"[dim]Transcript already exists: {output}[/dim]")
    else:
        err_console.print(
            f"\n[green]✓[/green] Wrote {output} ({format_size(result['bytes_written'])})"
        )

    if config.delivery.enabled:
        _deliver_or_exit(result, config)


@app.command("check")
def check(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Check that ffmpeg, yt-dlp and whisper.cpp are installed."""
    config = _load_config(config_file)
    missing = {tool["name"]: tool for tool in missing_requirements(config)}

    table = Table(title="Requirements")
    table.add_column("Tool", style="cyan")
    table.add_column("Executable")
    table.add_column("Status", style="yellow")
    for tool in required_tools(config):
        status = "[red]Missing[/red]" if tool["name"] in missing else "[green]✓ Found[/green]"
        table.add_row(tool["name"], escape(tool["executable"]), status)

    model = check_model_file(config.model_path)
    table.add_row(
        "model",
        escape(model["path"]),
        "[green]✓ Found[/green]" if model["exists"] else "[yellow]Not found[/yellow]",
    )
    err_console.print(table)

    for tool in missing.values():
        err_console.print(f"\n[red]{escape(tool['message'])}[/red]")
        err_console.print(escape(tool["install_hint"]))

    if missing:
        raise typer.Exit(1)


@app.command("clean")
def clean(
    transcript: Path = typer.Argument(..., help="Transcript file to clean"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write cleaned text here"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    deliver: bool = typer.Option(False, "--deliver", "-d", help="Send to the notes sink"),
    title: str | None = typer.Option(None, "--title", help="Note title (default: file name)"),
    sink: str | None = typer.Option(None, "--sink", help="Delivery sink: none, file, apple-notes"),
) -> None:
    """Strip annotations and filler words from a transcript."""
    config = _load_config(config_file, {"delivery": {"sink": sink}})

    try:
        validate_input_file(transcript)
    except ValidationError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    cleaned = clean_transcript(read_text(transcript), config.cleanup)

    if output:
        write_text(output, cleaned)
        err_console.print(f"[green]✓[/green] Wrote {output}")
    elif not deliver:
        _echo(cleaned)

    if deliver:
        try:
            delivered = create_sink(config.delivery).deliver(title or transcript.stem, cleaned)
        except DeliveryError as e:
            err_console.print(f"[red]Delivery failed: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        if not delivered:
            err_console.print("[red]Delivery failed: sink rejected the note[/red]")
            raise typer.Exit(1)
        err_console.print(f"[green]✓[/green] Delivered to {config.delivery.sink}")


@app.command("cleanup")
def cleanup(
    directory: Path = typer.Argument(..., help="Scratch directory to remove"),
) -> None:
    """Remove a scratch directory left behind by an earlier run."""
    try:
        cleanup_directory(directory)
    except ValidationError as e:
        err_console.print(escape(str(e)))
        raise typer.Exit(1)
    err_console.print("Cleaning up...")


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(Path(CONFIG_FILENAME), help="Where to write the config"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Write a default yttxt.yaml."""
    if path.exists() and not force:
        err_console.print(f"[red]Error: '{path}' already exists[/red]")
        raise typer.Exit(1)
    write_config(create_default_config(), path)
    err_console.print(f"[green]✓[/green] Created {path}")
