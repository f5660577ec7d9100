"""
yttxt.extract.audio - FFmpeg transcoder stage.

Builds the ffmpeg command that turns any input ffmpeg can decode into the
16kHz mono WAV stream whisper.cpp expects.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from yttxt.pipeline import Stage

SAMPLE_RATE = 16000
CHANNELS = 1
CODEC = "pcm_s16le"


def transcoder_command(
    source: Path | str = "-",
    remove_silence: bool = False,
    silence_filter: str | None = None,
) -> list[str]:
    """Build the ffmpeg argv for the transcoder stage.

    Args:
        source: Input file path, or "-" to read from stdin
        remove_silence: Insert a silenceremove audio filter
        silence_filter: ffmpeg filter expression used when removing silence

    Returns:
        ffmpeg argument list writing WAV to stdout
    """
    cmd = [
        "ffmpeg",
        "-hide_banner",
        "-loglevel",
        "error",
        "-i",
        str(source),
    ]
    if remove_silence and silence_filter:
        cmd += ["-af", silence_filter]
    cmd += [
        "-ar",
        str(SAMPLE_RATE),
        "-ac",
        str(CHANNELS),
        "-c:a",
        CODEC,
        "-f",
        "wav",
        "-",
    ]
    return cmd


def transcoder_stage(config: Any, source: Path | str = "-") -> Stage:
    """Transcoder stage reading from ``source`` (a file, or stdin)."""
    return Stage(
        name="ffmpeg",
        argv=transcoder_command(
            source,
            remove_silence=config.remove_silence,
            silence_filter=config.silence_filter,
        ),
    )


def format_size(size: int) -> str:
    """Format a byte count in human-readable form."""
    value = float(size)
    for unit in ["B", "KB", "MB", "GB"]:
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"
