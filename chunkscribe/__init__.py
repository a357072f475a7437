"""
chunkscribe - Chunked long-form audio transcription.

Splits a long recording into fixed-duration chunks, transcribes each chunk,
shifts chunk-relative timestamps onto the recording timeline, and writes
the merged transcript as JSON, plain text, and timestamped text. Finished
chunks are cached on disk so an interrupted run resumes where it stopped.
"""

__version__ = "0.1.0"
