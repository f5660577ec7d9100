"""
yttxt.extract.download - yt-dlp producer stage and metadata lookup.

The producer streams the best audio-only format to stdout without writing
.part files. Metadata (title and upload date) is fetched in a separate
yt-dlp call and used for note titles.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from yttxt.exceptions import DownloadError
from yttxt.logging import logger
from yttxt.pipeline import Stage


class VideoMetadata(BaseModel):
    """Title and upload date for a remote video."""

    title: str
    upload_date: str | None = None

    @property
    def formatted_date(self) -> str | None:
        return format_upload_date(self.upload_date)


def format_upload_date(upload_date: str | None) -> str | None:
    """Format a yt-dlp ``YYYYMMDD`` date as ``YYYY.MM.DD``.

    Values that don't parse are returned unchanged.
    """
    if not upload_date:
        return None
    try:
        return datetime.strptime(upload_date, "%Y%m%d").strftime("%Y.%m.%d")
    except ValueError:
        return upload_date


def _cookie_args(cookies_from_browser: str | None) -> list[str]:
    if cookies_from_browser:
        return ["--cookies-from-browser", cookies_from_browser]
    return []


def downloader_command(
    url: str,
    audio_format: str = "bestaudio[ext=m4a]",
    cookies_from_browser: str | None = None,
) -> list[str]:
    """Build the yt-dlp argv that writes the audio stream to stdout."""
    return [
        "yt-dlp",
        "-f",
        audio_format,
        *_cookie_args(cookies_from_browser),
        "-q",
        "--no-warnings",
        "--no-part",
        "-o",
        "-",
        url,
    ]


def downloader_stage(config: Any, url: str) -> Stage:
    """Producer stage for a remote video."""
    return Stage(
        name="yt-dlp",
        argv=downloader_command(
            url,
            audio_format=config.audio_format,
            cookies_from_browser=config.cookies_from_browser,
        ),
    )


def metadata_command(url: str, cookies_from_browser: str | None = None) -> list[str]:
    """Build the yt-dlp argv that prints title and upload date, one per line."""
    return [
        "yt-dlp",
        "--skip-download",
        "--no-warnings",
        *_cookie_args(cookies_from_browser),
        "--print",
        "title",
        "--print",
        "upload_date",
        url,
    ]


def parse_metadata_output(stdout: str) -> VideoMetadata:
    """Parse the two-line output of :func:`metadata_command`.

    Raises:
        DownloadError: If no title was printed
    """
    lines = [line.strip() for line in stdout.splitlines()]
    if not lines or not lines[0]:
        raise DownloadError("yt-dlp returned no title")
    upload_date = lines[1] if len(lines) > 1 and lines[1] not in ("", "NA") else None
    return VideoMetadata(title=lines[0], upload_date=upload_date)


def fetch_metadata(url: str, cookies_from_browser: str | None = None) -> VideoMetadata:
    """Look up the title and upload date of a remote video.

    Raises:
        DownloadError: If yt-dlp fails or prints nothing usable
    """
    cmd = metadata_command(url, cookies_from_browser)
    logger.debug("metadata: %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise DownloadError(f"Could not run yt-dlp: {e}") from e
    if proc.returncode != 0:
        raise DownloadError(f"yt-dlp metadata lookup failed: {proc.stderr.strip()}")
    return parse_metadata_output(proc.stdout)
