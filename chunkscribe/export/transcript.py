"""
chunkscribe.export.transcript - Transcript rendering and output files.

All three outputs are rendered from the same ordered segment list with no
reordering or filtering, and each file is fully rewritten on every run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import pydantic

from chunkscribe.exceptions import RenderError
from chunkscribe.export.timecode import format_span
from chunkscribe.io import dump_json, read_json, write_text
from chunkscribe.models import Segment, dump_segments, parse_segments

JSON_FILENAME = "combined.json"
TEXT_FILENAME = "transcription.txt"
TIMESTAMPED_FILENAME = "transcription_timestamps.txt"


@dataclass(frozen=True)
class TranscriptOutputs:
    """Paths of the rendered transcript files."""

    json_path: Path
    text_path: Path
    timestamped_path: Path

    @classmethod
    def in_directory(cls, output_dir: Path) -> TranscriptOutputs:
        return cls(
            json_path=output_dir / JSON_FILENAME,
            text_path=output_dir / TEXT_FILENAME,
            timestamped_path=output_dir / TIMESTAMPED_FILENAME,
        )


def render_json(segments: list[Segment]) -> str:
    """Full segment list as pretty-printed JSON (start, end, text)."""
    return dump_json(dump_segments(segments))


def render_text(segments: list[Segment]) -> str:
    """Segment texts, one per line, without timestamps."""
    return "".join(f"{seg.text}\n" for seg in segments)


def render_timestamped(segments: list[Segment]) -> str:
    """One ``[HH:MM:SS - HH:MM:SS] text`` line per segment."""
    return "".join(f"{format_span(seg.start, seg.end)} {seg.text}\n" for seg in segments)


def write_outputs(
    segments: list[Segment],
    output_dir: Path,
    include_json: bool = True,
) -> TranscriptOutputs:
    """Write the transcript files into ``output_dir``.

    Files are written in order (JSON, text, timestamped). If one fails,
    the ones before it stay on disk.

    Args:
        segments: Finalized, ordered transcript
        output_dir: Destination directory
        include_json: Also rewrite the structured JSON file

    Returns:
        TranscriptOutputs with the file paths

    Raises:
        RenderError: If any file cannot be written
    """
    outputs = TranscriptOutputs.in_directory(output_dir)

    renders = [
        (outputs.text_path, render_text),
        (outputs.timestamped_path, render_timestamped),
    ]
    if include_json:
        renders.insert(0, (outputs.json_path, render_json))

    for path, render in renders:
        try:
            write_text(path, render(segments))
        except OSError as e:
            raise RenderError(f"Error saving file {path.name}: {e}") from e

    return outputs


def load_transcript(json_path: Path) -> list[Segment]:
    """Read a previously written ``combined.json`` back into segments.

    Raises:
        RenderError: If the file is missing or not a valid segment list
    """
    try:
        return parse_segments(read_json(json_path))
    except FileNotFoundError as e:
        raise RenderError(f"Transcript not found: {json_path}") from e
    except (OSError, json.JSONDecodeError, pydantic.ValidationError) as e:
        raise RenderError(f"Invalid transcript {json_path}: {e}") from e
