"""
yttxt - Spoken text from YouTube videos and local media files.

Wires three external programs into a single streaming pipeline:
yt-dlp (download) → ffmpeg (16kHz mono PCM) → whisper.cpp (transcription),
with optional transcript cleanup and delivery to a notes application.
"""

__version__ = "0.1.0"
