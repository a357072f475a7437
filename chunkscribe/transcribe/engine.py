"""
chunkscribe.transcribe.engine - Transcription backends.

The OpenAI transcription API (whisper-1, verbose JSON with segment
timestamps) is the default backend. faster-whisper and mlx-whisper run
locally when installed. Every backend returns segments relative to the
start of the submitted chunk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from chunkscribe.exceptions import TranscriptionError
from chunkscribe.models import Segment

logger = logging.getLogger(__name__)

BACKENDS = ("openai", "faster", "mlx")

DEFAULT_MODELS = {
    "openai": "whisper-1",
    "faster": "medium",
    "mlx": "medium",
}


class Transcriber:
    """Transcription service for single audio chunks.

    The backend client or model is created on first use and reused for
    every following chunk. There are no retries: a failed call raises.
    """

    def __init__(self, backend: str = "openai", model: str | None = None) -> None:
        if backend not in BACKENDS:
            raise TranscriptionError(f"Unknown backend: {backend}")
        self.backend = backend
        self.model = model or DEFAULT_MODELS[backend]
        self._client: Any = None

    def transcribe(self, audio_path: Path, language: str | None = None) -> list[Segment]:
        """Transcribe one audio file.

        Args:
            audio_path: Path to the chunk
            language: Language code (auto-detect if None)

        Returns:
            Chunk-relative segments in the order the backend returned them

        Raises:
            TranscriptionError: If transcription fails
        """
        if not audio_path.exists():
            raise TranscriptionError(f"Audio file not found: {audio_path}")

        logger.debug("Transcribing %s with %s (%s)", audio_path.name, self.backend, self.model)

        try:
            if self.backend == "openai":
                result = self._transcribe_openai(audio_path, language)
            elif self.backend == "faster":
                result = self._transcribe_faster(audio_path, language)
            else:
                result = self._transcribe_mlx(audio_path, language)

            return _parse_whisper_result(result)

        except TranscriptionError:
            raise
        except Exception as e:
            raise TranscriptionError(f"Transcription failed for {audio_path.name}: {e}") from e

    def _transcribe_openai(self, audio_path: Path, language: str | None) -> dict[str, Any]:
        """Transcribe using the OpenAI audio transcriptions endpoint."""
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI()

        kwargs: dict[str, Any] = {
            "model": self.model,
            "response_format": "verbose_json",
            "timestamp_granularities": ["segment"],
        }
        if language:
            kwargs["language"] = language

        with open(audio_path, "rb") as audio_file:
            response = self._client.audio.transcriptions.create(file=audio_file, **kwargs)

        return response.model_dump()

    def _transcribe_faster(self, audio_path: Path, language: str | None) -> dict[str, Any]:
        """Transcribe using faster-whisper."""
        if self._client is None:
            try:
                from faster_whisper import WhisperModel
            except ImportError as e:
                raise TranscriptionError(
                    "faster-whisper not installed. Install with: pip install chunkscribe[faster]"
                ) from e
            self._client = WhisperModel(self.model, device="auto", compute_type="auto")

        kwargs = {}
        if language:
            kwargs["language"] = language

        segments, info = self._client.transcribe(str(audio_path), **kwargs)

        return {
            "language": info.language,
            "segments": [
                {"start": seg.start, "end": seg.end, "text": seg.text} for seg in segments
            ],
        }

    def _transcribe_mlx(self, audio_path: Path, language: str | None) -> dict[str, Any]:
        """Transcribe using mlx-whisper."""
        try:
            import mlx_whisper
        except ImportError as e:
            raise TranscriptionError(
                "mlx-whisper not installed. Install with: pip install chunkscribe[mlx]"
            ) from e

        kwargs = {"path_or_hf_repo": f"mlx-community/whisper-{self.model}-mlx"}
        if language:
            kwargs["language"] = language

        return mlx_whisper.transcribe(str(audio_path), **kwargs)


def _parse_whisper_result(result: dict[str, Any]) -> list[Segment]:
    """Parse a Whisper-style result dict into segments."""
    segments = []
    for seg in result.get("segments") or []:
        segments.append(
            Segment(
                start=float(seg.get("start", 0)),
                end=float(seg.get("end", 0)),
                text=(seg.get("text") or "").strip(),
            )
        )
    return segments


def create_transcriber_from_config(config: Any) -> Transcriber:
    """Create a Transcriber from a ChunkscribeConfig."""
    return Transcriber(backend=config.backend, model=config.model)
