"""Tests for chunkscribe.models module."""

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from chunkscribe.models import Chunk, Segment, dump_segments, parse_segments


class TestSegment:
    def test_field_order(self) -> None:
        assert list(Segment(start=1, end=2, text="x").model_dump()) == ["start", "end", "text"]

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Segment(start=-0.1, end=1, text="x")

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Segment(start=2, end=1, text="x")

    def test_zero_length_allowed(self) -> None:
        assert Segment(start=2, end=2, text="").end == 2.0

    def test_frozen(self) -> None:
        seg = Segment(start=0, end=1, text="x")
        with pytest.raises(pydantic.ValidationError):
            seg.start = 5

    def test_shifted(self) -> None:
        seg = Segment(start=0, end=3, text="world").shifted(600.0)
        assert (seg.start, seg.end, seg.text) == (600.0, 603.0, "world")


class TestSegmentLists:
    def test_parse_and_dump(self) -> None:
        raw = [{"start": 0, "end": 5, "text": "hello"}]
        segments = parse_segments(raw)
        assert dump_segments(segments) == [{"start": 0.0, "end": 5.0, "text": "hello"}]

    def test_parse_rejects_non_list(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            parse_segments({"start": 0, "end": 1, "text": "x"})


class TestChunk:
    def test_key_is_stem(self, tmp_path: Path) -> None:
        chunk = Chunk(index=3, path=tmp_path / "chunk_003.m4a", duration=600.0, offset=1800.0)
        assert chunk.key == "chunk_003"
