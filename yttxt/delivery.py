"""
yttxt.delivery - Hand cleaned transcripts to a notes sink.

Every sink implements ``deliver(title, body) -> bool``. A False return means
the sink was reachable but refused or failed the delivery; misconfiguration
raises DeliveryError.
"""

from __future__ import annotations

import html
import re
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from yttxt.exceptions import DeliveryError
from yttxt.io import write_text
from yttxt.logging import logger

UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')

# Creates the folder on first use, then adds the note. Arguments:
# folder name, path to a UTF-8 file holding the HTML body. Notes.app takes
# the note title from the body's first line, the <h1> heading.
NOTES_SCRIPT = [
    "on run argv",
    "set folderName to item 1 of argv",
    "set noteBody to read (POSIX file (item 2 of argv)) as «class utf8»",
    'tell application "Notes"',
    "if not (exists folder folderName) then",
    "make new folder with properties {name:folderName}",
    "end if",
    "make new note at folder folderName with properties {body:noteBody}",
    "end tell",
    "end run",
]


@runtime_checkable
class DeliverySink(Protocol):
    """Protocol for transcript delivery targets."""

    def deliver(self, title: str, body: str) -> bool:
        """Deliver a note.

        Args:
            title: Note heading
            body: Cleaned transcript text

        Returns:
            True if the note was stored
        """
        ...


class NullSink:
    """Accepts everything, stores nothing."""

    def deliver(self, title: str, body: str) -> bool:
        logger.debug("null sink: dropped %r", title)
        return True


class FileSink:
    """Writes each note as a Markdown file in a directory."""

    def __init__(self, notes_dir: Path) -> None:
        self.notes_dir = Path(notes_dir)

    def note_path(self, title: str) -> Path:
        name = UNSAFE_FILENAME_RE.sub("_", title).strip(" .") or "untitled"
        return self.notes_dir / f"{name}.md"

    def deliver(self, title: str, body: str) -> bool:
        path = self.note_path(title)
        try:
            write_text(path, f"# {title}\n\n{body}")
        except OSError as e:
            logger.warning("could not write note %s: %s", path, e)
            return False
        logger.debug("file sink: wrote %s", path)
        return True


def render_notes_html(title: str, body: str) -> str:
    """Render a note body as the simple HTML Notes.app expects."""
    parts = [f"<h1>{html.escape(title)}</h1>"]
    for line in body.splitlines():
        parts.append(f"<div>{html.escape(line) or '<br>'}</div>")
    return "\n".join(parts)


class AppleNotesSink:
    """Creates notes in Notes.app through osascript (macOS only)."""

    def __init__(self, folder: str = "Transcripts") -> None:
        self.folder = folder

    def check_available(self) -> str:
        if sys.platform != "darwin":
            raise DeliveryError("Apple Notes delivery is only available on macOS")
        osascript = shutil.which("osascript")
        if not osascript:
            raise DeliveryError("osascript not found in PATH")
        return osascript

    def command(self, osascript: str, body_path: Path) -> list[str]:
        cmd = [osascript]
        for line in NOTES_SCRIPT:
            cmd += ["-e", line]
        cmd += [self.folder, str(body_path)]
        return cmd

    def deliver(self, title: str, body: str) -> bool:
        osascript = self.check_available()

        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", suffix=".html", delete=False
        ) as tmp:
            tmp.write(render_notes_html(title, body))
            body_path = Path(tmp.name)
        try:
            proc = subprocess.run(
                self.command(osascript, body_path),
                capture_output=True,
                text=True,
            )
        finally:
            body_path.unlink(missing_ok=True)

        if proc.returncode != 0:
            logger.warning("osascript failed: %s", proc.stderr.strip())
            return False
        logger.debug("apple notes: added %r to %s", title, self.folder)
        return True


def create_sink(delivery_config: Any) -> DeliverySink:
    """Create the sink named by a DeliveryConfig.

    Raises:
        DeliveryError: If the sink name is unknown
    """
    sink = delivery_config.sink
    if sink == "none":
        return NullSink()
    if sink == "file":
        return FileSink(delivery_config.notes_dir)
    if sink == "apple-notes":
        return AppleNotesSink(delivery_config.folder)
    raise DeliveryError(f"Unknown delivery sink: {sink}")


def build_note_title(metadata: Any | None, fallback: str) -> str:
    """Heading for a delivered note: "<YYYY.MM.DD> <title>" when known."""
    if metadata is None:
        return fallback
    date = metadata.formatted_date
    return f"{date} {metadata.title}" if date else metadata.title
