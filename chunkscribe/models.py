"""
chunkscribe.models - Transcript data model.

Segments are validated with pydantic so that cache files and backend
responses are checked the same way before they reach the transcript.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class Segment(BaseModel):
    """A transcribed span of speech, in seconds."""

    model_config = ConfigDict(frozen=True)

    start: float = Field(ge=0.0)
    end: float
    text: str

    @model_validator(mode="after")
    def check_order(self) -> Segment:
        if self.end < self.start:
            raise ValueError(f"segment end {self.end} precedes start {self.start}")
        return self

    def shifted(self, offset: float) -> Segment:
        """Return a copy moved forward by ``offset`` seconds."""
        return Segment(start=self.start + offset, end=self.end + offset, text=self.text)


SegmentList = TypeAdapter(list[Segment])


def parse_segments(data: object) -> list[Segment]:
    """Validate raw JSON-like data as a list of segments.

    Raises:
        pydantic.ValidationError: If any entry is malformed
    """
    return SegmentList.validate_python(data)


def dump_segments(segments: list[Segment]) -> list[dict[str, object]]:
    """Serialize segments with stable field order (start, end, text)."""
    return [seg.model_dump() for seg in segments]


@dataclass(frozen=True)
class Chunk:
    """One extracted slice of the source recording."""

    index: int
    path: Path
    duration: float
    offset: float

    @property
    def key(self) -> str:
        return self.path.stem


@dataclass(frozen=True)
class ChunkOutcome:
    """What happened to a chunk during a pipeline run."""

    chunk: Chunk
    segment_count: int
    cached: bool
