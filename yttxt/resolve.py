"""
yttxt.resolve - Turn the command-line argument into an input reference.

An argument naming an existing file is a local input; anything else is
treated as a YouTube reference and reduced to its video identifier. The
output transcript name is derived from whichever one is active.
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, model_validator

from yttxt.exceptions import InputError

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class InputReference(BaseModel):
    """A resolved local file or remote video."""

    kind: str
    source: str
    video_id: str | None = None
    path: Path | None = None
    output_stem: str

    @model_validator(mode="after")
    def check_exactly_one(self) -> "InputReference":
        if (self.video_id is None) == (self.path is None):
            raise ValueError("exactly one of video_id or path must be set")
        if self.kind not in ("local", "remote"):
            raise ValueError(f"Unknown input kind: {self.kind}")
        return self

    @property
    def is_remote(self) -> bool:
        return self.kind == "remote"

    @property
    def output_name(self) -> str:
        return f"{self.output_stem}.txt"

    @property
    def watch_url(self) -> str | None:
        if self.video_id is None:
            return None
        return WATCH_URL.format(video_id=self.video_id)


def slice_video_id(source: str) -> str:
    """Take the text after the first ``v=`` and before the next ``&``.

    Without a ``v=`` marker the whole string is returned.
    """
    _, marker, rest = source.partition("v=")
    value = rest if marker else source
    return value.split("&", 1)[0]


def extract_video_id(source: str) -> str:
    """Extract the YouTube video identifier from a URL or bare reference.

    Handles watch URLs (``?v=ID``), short links (``youtu.be/ID``), query
    fragments such as ``v=ID&t=5`` and bare identifiers.

    Raises:
        InputError: If the identifier is empty or contains characters that
            cannot appear in a video id
    """
    source = source.strip()
    parsed = urlparse(source)

    video_id = None
    if parsed.query:
        values = parse_qs(parsed.query).get("v")
        if values:
            video_id = values[0]
    if video_id is None and parsed.netloc.lower() in SHORT_HOSTS:
        segments = [s for s in parsed.path.split("/") if s]
        if segments:
            video_id = segments[0]
    if video_id is None:
        video_id = slice_video_id(source)

    if not video_id or not VIDEO_ID_RE.match(video_id):
        raise InputError(f"Could not extract a video id from {source!r}")
    return video_id


def resolve_input(source: str) -> InputReference:
    """Resolve a command-line argument to a local file or remote video.

    Raises:
        InputError: If the argument is neither an existing file nor a
            usable video reference
    """
    if not source or not source.strip():
        raise InputError("No input given")

    path = Path(source).expanduser()
    if path.is_file():
        stem = path.name.rsplit(".", 1)[0] if "." in path.name else path.name
        if not stem:
            stem = path.name
        return InputReference(kind="local", source=source, path=path, output_stem=stem)

    video_id = extract_video_id(source)
    return InputReference(
        kind="remote",
        source=source,
        video_id=video_id,
        output_stem=f"yt{video_id}",
    )
