"""
yttxt.extract - Producer and transcoder stages.

Producer: yt-dlp streams the best audio-only format to stdout (remote input).
Transcoder: ffmpeg resamples to 16kHz mono signed 16-bit PCM WAV on stdout.
"""

from __future__ import annotations
