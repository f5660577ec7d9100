"""
yttxt.transcribe.engine - whisper.cpp command construction.

Unless a multilingual model is configured, whisper.cpp ignores the language
flag and transcribes as English.
"""

from __future__ import annotations

from typing import Any

from yttxt.pipeline import Stage


def whisper_command(
    executable: str,
    model_path: str,
    language: str,
    thread_count: int = 4,
    beam_size: int = 6,
    no_prints: bool = True,
    flash_attention: bool = True,
    translate: bool = False,
) -> list[str]:
    """Build the whisper.cpp argv that reads WAV from stdin.

    Args:
        executable: whisper-cli executable name or path
        model_path: Path to ggml model file
        language: Spoken language name or code passed to -l
        thread_count: Worker threads (-t)
        beam_size: Beam search width (-bs)
        no_prints: Suppress everything but results (-np)
        flash_attention: Enable flash attention (-fa)
        translate: Translate output to English (-tr)

    Returns:
        Argument list for subprocess
    """
    cmd = [executable, "-bs", str(beam_size)]
    if no_prints:
        cmd.append("-np")
    if flash_attention:
        cmd.append("-fa")
    cmd += ["-m", str(model_path), "-l", language]
    if translate:
        cmd.append("-tr")
    cmd += ["-f", "-", "-t", str(thread_count)]
    return cmd


def whisper_stage(config: Any) -> Stage:
    """Transcription stage built from a TranscriberConfig."""
    return Stage(
        name="whisper",
        argv=whisper_command(
            executable=config.whisper_executable,
            model_path=str(config.model_path),
            language=config.language,
            thread_count=config.thread_count,
            beam_size=config.beam_size,
            no_prints=config.no_prints,
            flash_attention=config.flash_attention,
            translate=config.translate,
        ),
    )
