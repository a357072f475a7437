"""
chunkscribe.pipeline.driver - Chunked transcription pipeline.

Removes chunk files from an earlier split, splits the input, then folds
over chunk 0, 1, 2, ... until the next chunk file is missing. Each step
probes the chunk, obtains its segments through the chunk cache, appends
them, and advances the offset.

Failure policy:
- split failure: SplitError propagates, nothing is rendered
- probe failure: iteration stops, partial transcript is still rendered
- transcription failure: TranscriptionError propagates, nothing is rendered
- cache write failure: logged, processing continues
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from chunkscribe.exceptions import ProbeError, ValidationError
from chunkscribe.export.transcript import TranscriptOutputs, write_outputs
from chunkscribe.media.ffmpeg import (
    SEGMENT_LENGTH,
    FFmpegMedia,
    chunk_pattern,
    clear_chunks,
    iter_chunk_paths,
)
from chunkscribe.models import Chunk, ChunkOutcome, Segment
from chunkscribe.pipeline.cache import ChunkCache, load_or_transcribe, source_fingerprint
from chunkscribe.pipeline.offset import OffsetTracker

logger = logging.getLogger(__name__)

STOP_EXHAUSTED = "exhausted"
STOP_PROBE_FAILED = "probe_failed"


class MediaUtility(Protocol):
    def split(self, source_path: Path, pattern: Path, segment_length: int = ...) -> None: ...

    def probe_duration(self, path: Path) -> float: ...


class TranscriptionService(Protocol):
    def transcribe(self, audio_path: Path, language: str | None = ...) -> list[Segment]: ...


@dataclass(frozen=True)
class PipelineState:
    """Accumulator threaded through the chunk fold."""

    tracker: OffsetTracker = field(default_factory=OffsetTracker)
    segments: tuple[Segment, ...] = ()
    outcomes: tuple[ChunkOutcome, ...] = ()


@dataclass(frozen=True)
class PipelineResult:
    """Merged transcript and per-chunk bookkeeping for one run."""

    segments: list[Segment]
    outcomes: list[ChunkOutcome]
    stop_reason: str = STOP_EXHAUSTED
    stop_detail: str | None = None

    @property
    def cached_count(self) -> int:
        return sum(1 for o in self.outcomes if o.cached)

    @property
    def transcribed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.cached)

    @property
    def total_duration(self) -> float:
        return sum(o.chunk.duration for o in self.outcomes)


@dataclass(frozen=True)
class TranscriptionRun:
    result: PipelineResult
    outputs: TranscriptOutputs
    output_dir: Path


def process_chunk(
    state: PipelineState,
    chunk: Chunk,
    transcriber: TranscriptionService,
    language: str | None,
    cache: ChunkCache | None = None,
) -> PipelineState:
    """One fold step: obtain the chunk's segments and advance the offset.

    ``chunk.offset`` must equal ``state.tracker.elapsed``.

    Raises:
        TranscriptionError: If the chunk is not cached and transcription fails
    """
    segments, cached = load_or_transcribe(
        cache,
        chunk,
        lambda path: transcriber.transcribe(path, language),
    )
    outcome = ChunkOutcome(chunk=chunk, segment_count=len(segments), cached=cached)
    return PipelineState(
        tracker=state.tracker.advance(chunk.duration),
        segments=state.segments + tuple(segments),
        outcomes=state.outcomes + (outcome,),
    )


def run_pipeline(
    input_path: Path,
    output_dir: Path,
    transcriber: TranscriptionService,
    language: str | None = "ru",
    media: MediaUtility | None = None,
    cache: ChunkCache | None = None,
    segment_length: int = SEGMENT_LENGTH,
    console=None,
) -> PipelineResult:
    """Split ``input_path`` and transcribe its chunks in index order.

    Args:
        input_path: Source recording
        output_dir: Directory for chunk files (and cache files)
        transcriber: Transcription service
        language: Language code passed to the service
        media: Media utility (FFmpeg by default)
        cache: Chunk cache, or None to disable caching
        segment_length: Chunk length in seconds
        console: Optional rich console for output

    Returns:
        PipelineResult with the merged transcript

    Raises:
        SplitError: If the input cannot be split
        TranscriptionError: If a chunk cannot be transcribed
    """
    media = media or FFmpegMedia()
    pattern = chunk_pattern(output_dir, input_path)

    removed = clear_chunks(pattern)
    if removed:
        logger.debug("Removed %d chunk file(s) from an earlier split", removed)

    if console:
        console.print(f"[cyan]Splitting {input_path.name} into {segment_length}s chunks...[/cyan]")
    media.split(input_path, pattern, segment_length)

    state = PipelineState()
    stop_reason = STOP_EXHAUSTED
    stop_detail = None

    for index, path in iter_chunk_paths(pattern):
        try:
            duration = media.probe_duration(path)
        except ProbeError as e:
            logger.warning("Failed to get duration of %s, stopping: %s", path.name, e)
            stop_reason = STOP_PROBE_FAILED
            stop_detail = str(e)
            break

        chunk = Chunk(index=index, path=path, duration=duration, offset=state.tracker.elapsed)

        if console:
            console.print(f"[dim]  {path.name} ({duration:.1f}s at {chunk.offset:.1f}s)[/dim]")

        state = process_chunk(state, chunk, transcriber, language, cache)

    logger.debug(
        "Pipeline stopped (%s) after %d chunk(s), %.1fs",
        stop_reason,
        len(state.outcomes),
        state.tracker.elapsed,
    )

    return PipelineResult(
        segments=list(state.segments),
        outcomes=list(state.outcomes),
        stop_reason=stop_reason,
        stop_detail=stop_detail,
    )


def transcribe_file(
    input_path: Path,
    config: Any,
    transcriber: TranscriptionService | None = None,
    media: MediaUtility | None = None,
    refresh: bool = False,
    console=None,
) -> TranscriptionRun:
    """Transcribe one recording end to end and write the output files.

    Args:
        input_path: Source recording
        config: ChunkscribeConfig
        transcriber: Transcription service (built from config if None)
        media: Media utility (FFmpeg by default)
        refresh: Ignore cached chunk results
        console: Optional rich console for output

    Raises:
        ValidationError: If the input file does not exist
        SplitError, TranscriptionError, RenderError: See run_pipeline
    """
    if not input_path.is_file():
        raise ValidationError(f"Input file not found: {input_path}")

    if transcriber is None:
        from chunkscribe.transcribe.engine import create_transcriber_from_config

        transcriber = create_transcriber_from_config(config)

    output_dir = config.resolve_output_dir(input_path)
    cache = None
    if config.use_cache:
        cache = ChunkCache(
            output_dir,
            refresh=refresh,
            source=source_fingerprint(input_path, config.segment_length),
        )

    result = run_pipeline(
        input_path=input_path,
        output_dir=output_dir,
        transcriber=transcriber,
        language=config.language,
        media=media,
        cache=cache,
        segment_length=config.segment_length,
        console=console,
    )

    outputs = write_outputs(result.segments, output_dir)
    return TranscriptionRun(result=result, outputs=outputs, output_dir=output_dir)
