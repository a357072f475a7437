"""
chunkscribe.pipeline - Chunked transcription pipeline.

Enumerates chunks in index order, tracks the cumulative offset, and
short-circuits finished chunks through the on-disk chunk cache.
"""

from __future__ import annotations
