"""
chunkscribe.media - Chunk extraction and duration probing.

Wraps FFmpeg's segment muxer to cut the source recording into numbered,
fixed-length chunks, and ffprobe to measure each chunk.
"""

from __future__ import annotations
