"""
chunkscribe.media.ffmpeg - FFmpeg chunk extraction and duration probing.

Splits the source recording into fixed-length chunks with the segment muxer
(stream copy, no re-encoding) and probes each chunk's duration with ffprobe.
"""

from __future__ import annotations

import math
import subprocess
from collections.abc import Iterator
from pathlib import Path

from chunkscribe.exceptions import ProbeError, SplitError

SEGMENT_LENGTH = 600
CHUNK_STEM = "chunk_%03d"
DEFAULT_CHUNK_EXT = ".m4a"


def chunk_pattern(output_dir: Path, source_path: Path) -> Path:
    """Numbered chunk file pattern for a source file, e.g. ``chunk_%03d.m4a``."""
    ext = source_path.suffix or DEFAULT_CHUNK_EXT
    return output_dir / f"{CHUNK_STEM}{ext}"


def chunk_path(pattern: Path, index: int) -> Path:
    """Path of chunk ``index`` for a numbered pattern."""
    return Path(str(pattern) % index)


def iter_chunk_paths(pattern: Path) -> Iterator[tuple[int, Path]]:
    """Yield (index, path) for chunk 0, 1, 2, ... up to the first missing one."""
    index = 0
    while True:
        path = chunk_path(pattern, index)
        if not path.exists():
            return
        yield index, path
        index += 1


def clear_chunks(pattern: Path) -> int:
    """Delete chunk files left over from an earlier split of ``pattern``.

    Only media files named like the pattern are removed; cache files keep
    a different suffix and survive.

    Returns:
        Number of files removed
    """
    prefix = CHUNK_STEM.split("%")[0]
    removed = 0
    if not pattern.parent.is_dir():
        return removed
    for path in pattern.parent.glob(f"{prefix}*{pattern.suffix}"):
        if path.stem[len(prefix) :].isdigit():
            path.unlink()
            removed += 1
    return removed


class FFmpegMedia:
    """Media utility backed by the ffmpeg and ffprobe executables."""

    def __init__(self, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe") -> None:
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    def split(
        self,
        source_path: Path,
        pattern: Path,
        segment_length: int = SEGMENT_LENGTH,
    ) -> None:
        """Split ``source_path`` into chunks named by ``pattern``.

        Args:
            source_path: Recording to split
            pattern: Output pattern with a ``%03d`` placeholder
            segment_length: Chunk length in seconds

        Raises:
            SplitError: If FFmpeg fails or produces no chunks
        """
        cmd = [
            self.ffmpeg,
            "-y",
            "-loglevel",
            "error",
            "-i",
            str(source_path),
            "-f",
            "segment",
            "-segment_time",
            str(segment_length),
            "-c",
            "copy",
            str(pattern),
        ]

        try:
            pattern.parent.mkdir(parents=True, exist_ok=True)
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise SplitError(f"Cannot run {self.ffmpeg}: {e}") from e

        if proc.returncode != 0:
            raise SplitError(f"FFmpeg split failed: {proc.stderr.strip()}")

        if not chunk_path(pattern, 0).exists():
            raise SplitError(f"FFmpeg produced no chunks for {source_path}")

    def probe_duration(self, path: Path) -> float:
        """Duration of a media file in seconds.

        Raises:
            ProbeError: If ffprobe fails or reports no usable duration
        """
        cmd = [
            self.ffprobe,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "csv=p=0",
            str(path),
        ]

        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ProbeError(f"Cannot run {self.ffprobe}: {e}") from e

        if proc.returncode != 0:
            raise ProbeError(f"ffprobe failed for {path}: {proc.stderr.strip()}")

        raw = proc.stdout.strip()
        try:
            duration = float(raw)
        except ValueError as e:
            raise ProbeError(f"Unreadable duration for {path}: {raw!r}") from e

        if not math.isfinite(duration) or duration <= 0:
            raise ProbeError(f"Non-positive duration for {path}: {duration}")
        return duration
