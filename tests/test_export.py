"""Tests for chunkscribe.export modules."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chunkscribe.exceptions import RenderError
from chunkscribe.export.timecode import format_span, seconds_to_clock
from chunkscribe.export.transcript import (
    load_transcript,
    render_json,
    render_text,
    render_timestamped,
    write_outputs,
)
from chunkscribe.models import Segment


@pytest.fixture
def merged() -> list[Segment]:
    return [
        Segment(start=0, end=5, text="hello"),
        Segment(start=600, end=603, text="world"),
    ]


class TestSecondsToClock:
    def test_truncates_not_rounds(self) -> None:
        assert seconds_to_clock(3725.9) == "01:02:05"

    def test_zero(self) -> None:
        assert seconds_to_clock(0) == "00:00:00"

    def test_just_under_a_minute(self) -> None:
        assert seconds_to_clock(59.999) == "00:00:59"

    def test_exact_minute(self) -> None:
        assert seconds_to_clock(60.0) == "00:01:00"

    def test_ten_minutes(self) -> None:
        assert seconds_to_clock(600.0) == "00:10:00"

    def test_hours_do_not_wrap(self) -> None:
        assert seconds_to_clock(100 * 3600 + 1) == "100:00:01"

    def test_format_span(self) -> None:
        assert format_span(600.0, 603.4) == "[00:10:00 - 00:10:03]"


class TestRenderers:
    def test_json_field_order(self, merged: list[Segment]) -> None:
        rendered = render_json(merged)
        first = rendered.index('"start"')
        assert first < rendered.index('"end"') < rendered.index('"text"')
        assert json.loads(rendered)[1] == {"start": 600.0, "end": 603.0, "text": "world"}

    def test_json_is_pretty_printed(self, merged: list[Segment]) -> None:
        assert "\n  {" in render_json(merged)

    def test_json_keeps_unicode(self) -> None:
        rendered = render_json([Segment(start=0, end=1, text="Привет")])
        assert "Привет" in rendered

    def test_text_one_line_per_segment(self, merged: list[Segment]) -> None:
        assert render_text(merged) == "hello\nworld\n"

    def test_timestamped_lines(self, merged: list[Segment]) -> None:
        assert render_timestamped(merged).splitlines() == [
            "[00:00:00 - 00:00:05] hello",
            "[00:10:00 - 00:10:03] world",
        ]

    def test_empty_transcript(self) -> None:
        assert render_text([]) == ""
        assert render_timestamped([]) == ""
        assert json.loads(render_json([])) == []

    def test_no_reordering(self) -> None:
        segments = [
            Segment(start=10, end=11, text="later"),
            Segment(start=1, end=2, text="earlier"),
        ]
        assert render_text(segments) == "later\nearlier\n"


class TestWriteOutputs:
    def test_writes_three_files(self, tmp_path: Path, merged: list[Segment]) -> None:
        outputs = write_outputs(merged, tmp_path / "out")

        assert outputs.json_path.name == "combined.json"
        assert outputs.text_path.name == "transcription.txt"
        assert outputs.timestamped_path.name == "transcription_timestamps.txt"
        assert outputs.text_path.read_text(encoding="utf-8") == "hello\nworld\n"

    def test_rewrites_instead_of_appending(self, tmp_path: Path, merged: list[Segment]) -> None:
        write_outputs(merged, tmp_path)
        write_outputs(merged[:1], tmp_path)

        assert (tmp_path / "transcription.txt").read_text(encoding="utf-8") == "hello\n"
        assert len(json.loads((tmp_path / "combined.json").read_text(encoding="utf-8"))) == 1

    def test_skip_json(self, tmp_path: Path, merged: list[Segment]) -> None:
        write_outputs(merged, tmp_path, include_json=False)
        assert not (tmp_path / "combined.json").exists()
        assert (tmp_path / "transcription_timestamps.txt").exists()

    def test_failure_keeps_earlier_files(self, tmp_path: Path, merged: list[Segment]) -> None:
        (tmp_path / "transcription.txt").mkdir()

        with pytest.raises(RenderError):
            write_outputs(merged, tmp_path)

        assert (tmp_path / "combined.json").exists()
        assert not (tmp_path / "transcription_timestamps.txt").exists()


class TestLoadTranscript:
    def test_round_trip(self, tmp_path: Path, merged: list[Segment]) -> None:
        outputs = write_outputs(merged, tmp_path)
        assert load_transcript(outputs.json_path) == merged

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RenderError, match="not found"):
            load_transcript(tmp_path / "combined.json")

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "combined.json"
        path.write_text('{"segments": "nope"}')
        with pytest.raises(RenderError, match="Invalid transcript"):
            load_transcript(path)
