"""
yttxt.cache - Decide whether a transcript can be reused.

Two modes:
- presence: an existing transcript file means the work is done.
- fingerprint: the transcript is reused only if a sidecar JSON records the
  same input identity and transcription settings.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from yttxt.io import read_json, write_json
from yttxt.logging import logger

SIDECAR_SUFFIX = ".fingerprint.json"

# Settings that change what whisper.cpp produces.
FINGERPRINT_FIELDS = (
    "model_path",
    "language",
    "beam_size",
    "translate",
    "no_prints",
    "remove_silence",
    "silence_filter",
    "audio_format",
)


def compute_file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file."""
    sha256 = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return f"sha256:{sha256.hexdigest()}"


def sidecar_path(output_path: Path) -> Path:
    return output_path.with_name(output_path.name + SIDECAR_SUFFIX)


def input_identity(ref: Any) -> str:
    """Content hash for local files, video id for remote videos."""
    if ref.is_remote:
        return f"youtube:{ref.video_id}"
    return compute_file_hash(ref.path)


def compute_fingerprint(ref: Any, config: Any) -> dict[str, Any]:
    """Build the fingerprint record for an input and configuration."""
    settings = {name: str(getattr(config, name)) for name in FINGERPRINT_FIELDS}
    if not config.remove_silence:
        settings.pop("silence_filter")
    if not ref.is_remote:
        settings.pop("audio_format")

    payload = {"input": input_identity(ref), "settings": settings}
    digest = hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()
    return {**payload, "fingerprint": f"sha256:{digest}"}


def is_cached(output_path: Path, ref: Any, config: Any) -> bool:
    """Return True if the transcript at output_path can be reused."""
    if not output_path.exists():
        return False

    if config.cache_mode == "presence":
        logger.debug("cache hit (presence): %s", output_path)
        return True

    sidecar = sidecar_path(output_path)
    if not sidecar.exists():
        logger.debug("cache miss (no fingerprint): %s", output_path)
        return False
    try:
        recorded = read_json(sidecar).get("fingerprint")
    except (OSError, ValueError):
        logger.debug("cache miss (unreadable fingerprint): %s", sidecar)
        return False

    current = compute_fingerprint(ref, config)["fingerprint"]
    hit = recorded == current
    logger.debug("cache %s (fingerprint): %s", "hit" if hit else "stale", output_path)
    return hit


def record_fingerprint(output_path: Path, ref: Any, config: Any) -> Path:
    """Write the fingerprint sidecar for a freshly produced transcript."""
    sidecar = sidecar_path(output_path)
    write_json(sidecar, compute_fingerprint(ref, config))
    return sidecar
