"""
chunkscribe.pipeline.cache - Per-chunk transcription cache.

Each chunk's recording-relative segments are stored next to the chunk as
``<chunk stem>.json`` so an interrupted run can skip finished chunks.

Entries are written as an envelope that records what produced them::

    {
        "chunk": "chunk_000.m4a",
        "offset": 0.0,
        "source": {"name": "talk.m4a", "size": 1234, "mtime_ns": ..., "segment_length": 600},
        "segments": [...]
    }

An entry is only served for the same chunk file, base offset and source.
Anything else (another input sharing the directory, a different chunk
length) is a miss and gets re-transcribed. A bare list of segments (no
envelope) carries no such record and is used as-is.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pydantic

from chunkscribe.exceptions import CacheError
from chunkscribe.io import read_json, write_json
from chunkscribe.models import Chunk, Segment, dump_segments, parse_segments
from chunkscribe.pipeline.offset import OffsetTracker

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".json"


def source_fingerprint(input_path: Path, segment_length: int) -> dict[str, Any]:
    """Identity of the recording and split settings a chunk was cut from."""
    stat = input_path.stat()
    return {
        "name": input_path.name,
        "size": stat.st_size,
        "mtime_ns": stat.st_mtime_ns,
        "segment_length": segment_length,
    }


@dataclass(frozen=True)
class CacheEntry:
    """Cached segments plus a record of what produced them.

    ``offset``, ``chunk`` and ``source`` are None for legacy entries that
    were stored as a bare segment list.
    """

    segments: list[Segment]
    offset: float | None = None
    chunk: str | None = None
    source: dict[str, Any] | None = None

    @property
    def is_legacy(self) -> bool:
        return self.offset is None and self.chunk is None and self.source is None

    def matches(self, chunk: Chunk, source: dict[str, Any] | None = None) -> bool:
        """Whether this entry was produced for ``chunk`` cut from ``source``."""
        if self.is_legacy:
            return True
        if self.chunk is not None and self.chunk != chunk.path.name:
            return False
        if self.offset is not None and self.offset != chunk.offset:
            return False
        return source is None or self.source == source


class ChunkCache:
    """Key-value store of chunk results, one JSON file per key.

    Args:
        directory: Directory holding the cache files
        refresh: Ignore existing entries (they are still overwritten)
        source: Fingerprint of the current input, see ``source_fingerprint``
    """

    def __init__(
        self,
        directory: Path,
        refresh: bool = False,
        source: dict[str, Any] | None = None,
    ) -> None:
        self.directory = directory
        self.refresh = refresh
        self.source = source

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_SUFFIX}"

    def get(self, key: str) -> CacheEntry | None:
        """Return the cached entry for ``key``, or None on a miss.

        Unparsable files count as a miss and are logged.
        """
        if self.refresh:
            return None

        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            raw = read_json(path)
            return _parse_entry(raw)
        except (OSError, json.JSONDecodeError, pydantic.ValidationError, CacheError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", path, e)
            return None

    def put(self, key: str, entry: CacheEntry) -> Path:
        """Persist ``entry`` under ``key``.

        Raises:
            CacheError: If the file cannot be written
        """
        path = self.path_for(key)
        data: dict[str, Any] = {}
        if entry.chunk is not None:
            data["chunk"] = entry.chunk
        data["offset"] = entry.offset
        if entry.source is not None:
            data["source"] = entry.source
        data["segments"] = dump_segments(entry.segments)
        try:
            write_json(path, data)
        except OSError as e:
            raise CacheError(f"Cannot write cache file {path}: {e}") from e
        return path


def _parse_entry(raw: object) -> CacheEntry:
    if isinstance(raw, list):
        return CacheEntry(segments=parse_segments(raw))
    if isinstance(raw, dict) and "segments" in raw:
        offset = raw.get("offset")
        if offset is not None and not isinstance(offset, (int, float)):
            raise CacheError(f"Invalid offset in cache entry: {offset!r}")
        chunk = raw.get("chunk")
        if chunk is not None and not isinstance(chunk, str):
            raise CacheError(f"Invalid chunk name in cache entry: {chunk!r}")
        source = raw.get("source")
        if source is not None and not isinstance(source, dict):
            raise CacheError(f"Invalid source in cache entry: {source!r}")
        return CacheEntry(
            segments=parse_segments(raw["segments"]),
            offset=float(offset) if offset is not None else None,
            chunk=chunk,
            source=source,
        )
    raise CacheError("Cache entry is neither a segment list nor an envelope")


def load_or_transcribe(
    cache: ChunkCache | None,
    chunk: Chunk,
    transcribe: Callable[[Path], list[Segment]],
) -> tuple[list[Segment], bool]:
    """Segments for ``chunk`` from the cache, or from ``transcribe``.

    Fresh results are shifted by the chunk's offset and persisted; a failed
    write is logged and does not affect the returned segments.

    Args:
        cache: Chunk cache, or None to always transcribe
        chunk: The chunk being processed
        transcribe: Callable returning chunk-relative segments for a path

    Returns:
        Tuple of (recording-relative segments, whether they came from cache)

    Raises:
        TranscriptionError: Propagated from ``transcribe``
    """
    if cache is not None:
        entry = cache.get(chunk.key)
        if entry is not None:
            if entry.matches(chunk, cache.source):
                logger.debug("Cache hit for %s", chunk.path.name)
                return list(entry.segments), True
            logger.info("Cache entry for %s is from another run, re-transcribing", chunk.path.name)

    segments = OffsetTracker(chunk.offset).shift(transcribe(chunk.path))

    if cache is not None:
        entry = CacheEntry(segments, chunk.offset, chunk.path.name, cache.source)
        try:
            cache.put(chunk.key, entry)
        except CacheError as e:
            logger.warning("%s; continuing without caching %s", e, chunk.path.name)

    return segments, False
