"""
yttxt.transcribe - whisper.cpp transcription stage.

Consumes PCM WAV on stdin and writes recognised text to stdout.
"""

from __future__ import annotations
