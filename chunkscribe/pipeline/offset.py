"""
chunkscribe.pipeline.offset - Cumulative chunk offset.

The tracker is an immutable accumulator: each chunk reads ``elapsed`` as its
base offset, and ``advance`` returns the tracker for the next chunk. It has
no notion of chunk identity, so callers must advance in index order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from chunkscribe.models import Segment


@dataclass(frozen=True)
class OffsetTracker:
    """Running total of the durations of already-processed chunks."""

    elapsed: float = 0.0

    def advance(self, duration: float) -> OffsetTracker:
        """Return the tracker after a chunk of ``duration`` seconds."""
        if duration < 0:
            raise ValueError(f"Chunk duration cannot be negative: {duration}")
        return OffsetTracker(self.elapsed + duration)

    def shift(self, segments: Iterable[Segment]) -> list[Segment]:
        """Convert chunk-relative segments to recording-relative ones."""
        return [seg.shifted(self.elapsed) for seg in segments]
