"""
yttxt.driver - End-to-end orchestration of one invocation.

Resolve input → check cache → (remote: fetch metadata) → run
producer/transcoder/transcriber → record fingerprint, then optionally clean
the transcript and deliver it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.markup import escape

from yttxt.cache import is_cached, record_fingerprint
from yttxt.clean import clean_transcript
from yttxt.config import TranscriberConfig
from yttxt.delivery import DeliverySink, build_note_title, create_sink
from yttxt.extract.audio import transcoder_stage
from yttxt.extract.download import downloader_stage, fetch_metadata
from yttxt.io import read_text
from yttxt.logging import logger
from yttxt.pipeline import Stage, run_pipeline
from yttxt.resolve import InputReference, resolve_input
from yttxt.transcribe.engine import whisper_stage


def build_stages(ref: InputReference, config: TranscriberConfig) -> list[Stage]:
    """Stages for an input: yt-dlp | ffmpeg | whisper, or ffmpeg | whisper."""
    if ref.is_remote:
        return [
            downloader_stage(config, ref.watch_url),
            transcoder_stage(config, "-"),
            whisper_stage(config),
        ]
    return [
        transcoder_stage(config, ref.path),
        whisper_stage(config),
    ]


def transcript_path(ref: InputReference, config: TranscriberConfig) -> Path:
    return config.output_dir / ref.output_name


def transcribe_source(
    source: str,
    config: TranscriberConfig,
    echo: Callable[[str], Any] | None = None,
    force: bool = False,
    cancel: threading.Event | None = None,
    console=None,
) -> dict[str, Any]:
    """Produce a transcript for a URL or local file.

    Args:
        source: Command-line argument (URL, video reference or file path)
        config: Resolved configuration
        echo: Receives transcript text as it is produced
        force: Ignore an existing transcript
        cancel: Set to tear the pipeline down early
        console: Optional rich console for progress output

    Returns:
        Dict with status ("cached" or "transcribed"), input, output,
        metadata and bytes_written

    Raises:
        InputError: If the source cannot be resolved
        DownloadError: If the remote metadata lookup fails
        PipelineError: If any stage fails
        PipelineCancelled: If cancelled or interrupted
    """
    ref = resolve_input(source)
    output_path = transcript_path(ref, config)

    result: dict[str, Any] = {
        "status": None,
        "input": ref,
        "output": output_path,
        "metadata": None,
        "bytes_written": 0,
    }

    if not force and is_cached(output_path, ref, config):
        result["status"] = "cached"
        return result

    if ref.is_remote:
        if console:
            console.print(f"[dim]  Fetching metadata for {ref.video_id}...[/dim]")
        result["metadata"] = fetch_metadata(ref.watch_url, config.cookies_from_browser)
        if console:
            console.print(f"[dim]  Title: {escape(result['metadata'].title)}[/dim]")

    stages = build_stages(ref, config)
    if console:
        names = " | ".join(stage.name for stage in stages)
        console.print(f"[dim]  Running {names}...[/dim]")

    run = run_pipeline(stages, output_path, echo=echo, cancel=cancel)

    if config.cache_mode == "fingerprint":
        record_fingerprint(output_path, ref, config)

    result["status"] = "transcribed"
    result["bytes_written"] = run["bytes_written"]
    result["returncodes"] = run["returncodes"]
    return result


def deliver_transcript(
    result: dict[str, Any],
    config: TranscriberConfig,
    sink: DeliverySink | None = None,
) -> bool:
    """Clean a finished transcript and hand it to the delivery sink.

    Remote inputs served from cache have no metadata yet; it is fetched
    here so the note gets its dated title.

    Raises:
        DeliveryError: If the sink is misconfigured
        DownloadError: If the metadata lookup fails
    """
    ref: InputReference = result["input"]
    body = clean_transcript(read_text(result["output"]), config.cleanup)

    metadata = result.get("metadata")
    if metadata is None and ref.is_remote:
        metadata = fetch_metadata(ref.watch_url, config.cookies_from_browser)
        result["metadata"] = metadata

    title = build_note_title(metadata, ref.output_stem)
    sink = sink or create_sink(config.delivery)
    delivered = sink.deliver(title, body)
    logger.debug("delivery of %r: %s", title, "ok" if delivered else "failed")
    result["delivered"] = delivered
    return delivered
