"""
yttxt.validation - Dependency checks and validation utilities.

Verifies that ffmpeg, yt-dlp and the whisper.cpp executable can be found
before any work starts. Checks only look at PATH and the filesystem; they
never spawn a process.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Any

from yttxt.exceptions import DependencyError, ValidationError

WHISPER_INSTALL_HINT = "\n".join(
    [
        "The C++ implementation of Whisper is required: https://github.com/ggerganov/whisper.cpp",
        "Sample usage:",
        "",
        "  git clone https://github.com/ggerganov/whisper.cpp",
        "  cd whisper.cpp",
        "  cmake -B build && cmake --build build -j --config Release",
        "  yttxt transcribe https://www.youtube.com/watch?v=1234567890",
    ]
)


def find_executable(name: str) -> str | None:
    """Resolve an executable by name on PATH, or by explicit path."""
    found = shutil.which(name)
    if found:
        return found
    path = Path(name).expanduser()
    if path.is_file() and os.access(path, os.X_OK):
        return str(path)
    return None


def required_tools(config: Any) -> list[dict[str, str]]:
    """Return the external tools needed by the pipeline, in check order."""
    return [
        {
            "name": "ffmpeg",
            "executable": "ffmpeg",
            "message": "ffmpeg is required",
            "install_hint": "https://ffmpeg.org",
        },
        {
            "name": "yt-dlp",
            "executable": "yt-dlp",
            "message": "yt-dlp is required",
            "install_hint": "https://github.com/yt-dlp/yt-dlp",
        },
        {
            "name": "whisper.cpp",
            "executable": config.whisper_executable,
            "message": f"'{config.whisper_executable}' not found",
            "install_hint": WHISPER_INSTALL_HINT,
        },
    ]


def check_requirements(config: Any) -> dict[str, str]:
    """Check that every required tool is installed.

    Args:
        config: TranscriberConfig (only whisper_executable is read)

    Returns:
        Dict mapping tool name to resolved executable path

    Raises:
        DependencyError: For the first tool that cannot be found
    """
    resolved = {}
    for tool in required_tools(config):
        path = find_executable(tool["executable"])
        if not path:
            raise DependencyError(tool["name"], tool["message"], tool["install_hint"])
        resolved[tool["name"]] = path
    return resolved


def missing_requirements(config: Any) -> list[dict[str, str]]:
    """Return every required tool that cannot be found, without raising."""
    return [tool for tool in required_tools(config) if not find_executable(tool["executable"])]


def check_model_file(model_path: Path) -> dict[str, Any]:
    """Report whether the whisper model file exists.

    A missing model is a warning only: whisper.cpp reports it itself, and
    the path may be relative to the whisper executable's working directory.
    """
    exists = model_path.is_file()
    return {
        "path": str(model_path),
        "exists": exists,
        "size_mb": model_path.stat().st_size // (1024 * 1024) if exists else 0,
    }


def validate_input_file(path: Path) -> dict[str, Any]:
    """Validate an input file exists and is a regular file.

    Raises:
        ValidationError: If file doesn't exist or is not a regular file
    """
    if not path.exists():
        raise ValidationError(f"File not found: {path}")

    if not path.is_file():
        raise ValidationError(f"Not a file: {path}")

    return {
        "path": str(path),
        "exists": True,
        "size_mb": path.stat().st_size // (1024 * 1024),
    }
