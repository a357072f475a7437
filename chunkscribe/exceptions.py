"""
chunkscribe.exceptions - Custom exception classes.

All chunkscribe-specific exceptions inherit from ChunkscribeError.
"""


class ChunkscribeError(Exception):
    """Base exception for all chunkscribe errors."""

    pass


class ConfigError(ChunkscribeError):
    """Configuration loading or validation error."""

    pass


class SplitError(ChunkscribeError):
    """Audio splitting error."""

    pass


class ProbeError(ChunkscribeError):
    """Chunk duration could not be determined."""

    pass


class TranscriptionError(ChunkscribeError):
    """Transcription error."""

    pass


class CacheError(ChunkscribeError):
    """Chunk cache read or write error."""

    pass


class RenderError(ChunkscribeError):
    """Final transcript output could not be written."""

    pass


class ValidationError(ChunkscribeError):
    """Input validation error."""

    pass


class DependencyError(ChunkscribeError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
