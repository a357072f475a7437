"""
chunkscribe.transcribe - Transcription service backends.

Turns one audio chunk into chunk-relative segments using the OpenAI
transcription API (default), faster-whisper, or mlx-whisper.
"""

from __future__ import annotations
