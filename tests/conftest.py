"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from chunkscribe.exceptions import ProbeError, SplitError, TranscriptionError
from chunkscribe.media.ffmpeg import chunk_path
from chunkscribe.models import Segment


def chunk_index(path: Path) -> int:
    return int(path.stem.split("_")[1])


class FakeMedia:
    """Media utility that writes empty chunk files and reports fixed durations."""

    def __init__(
        self,
        durations: list[float],
        fail_probe_at: set[int] | None = None,
        fail_split: bool = False,
    ) -> None:
        self.durations = durations
        self.fail_probe_at = fail_probe_at or set()
        self.fail_split = fail_split
        self.split_calls: list[tuple[Path, Path, int]] = []
        self.probed: list[str] = []

    def split(self, source_path: Path, pattern: Path, segment_length: int = 600) -> None:
        self.split_calls.append((source_path, pattern, segment_length))
        if self.fail_split:
            raise SplitError(f"cannot split {source_path}")
        pattern.parent.mkdir(parents=True, exist_ok=True)
        for index in range(len(self.durations)):
            chunk_path(pattern, index).write_bytes(b"audio")

    def probe_duration(self, path: Path) -> float:
        self.probed.append(path.name)
        index = chunk_index(path)
        if index in self.fail_probe_at:
            raise ProbeError(f"ffprobe failed for {path}")
        return self.durations[index]


class FakeTranscriber:
    """Deterministic transcription service keyed by chunk index."""

    def __init__(
        self,
        results: dict[int, list[Segment]],
        fail_at: set[int] | None = None,
    ) -> None:
        self.results = results
        self.fail_at = fail_at or set()
        self.calls: list[tuple[str, str | None]] = []

    def transcribe(self, audio_path: Path, language: str | None = None) -> list[Segment]:
        self.calls.append((audio_path.name, language))
        index = chunk_index(audio_path)
        if index in self.fail_at:
            raise TranscriptionError(f"service unavailable for {audio_path.name}")
        return list(self.results.get(index, []))


class ForbiddenTranscriber:
    """Fails the test if the transcription service is reached."""

    def transcribe(self, audio_path: Path, language: str | None = None) -> list[Segment]:
        pytest.fail(f"transcription service called for {audio_path.name}")


@pytest.fixture
def make_media():
    return FakeMedia


@pytest.fixture
def make_transcriber():
    return FakeTranscriber


@pytest.fixture
def forbidden_transcriber() -> ForbiddenTranscriber:
    return ForbiddenTranscriber()


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    """Create a placeholder input recording."""
    path = tmp_path / "lecture.m4a"
    path.write_bytes(b"not really audio")
    return path


@pytest.fixture
def two_chunk_results() -> dict[int, list[Segment]]:
    """Chunk-relative results for a 600s + 45.3s recording."""
    return {
        0: [Segment(start=0, end=5, text="hello")],
        1: [Segment(start=0, end=3, text="world")],
    }


@pytest.fixture
def three_chunk_results() -> dict[int, list[Segment]]:
    return {
        0: [
            Segment(start=0.0, end=4.2, text="Добрый вечер."),
            Segment(start=4.2, end=9.8, text="Начнём."),
        ],
        1: [Segment(start=1.5, end=7.25, text="Второй фрагмент.")],
        2: [
            Segment(start=0.0, end=2.0, text="Третий."),
            Segment(start=2.0, end=2.0, text=""),
        ],
    }
