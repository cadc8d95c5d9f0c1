"""Custom Exceptions for the chunkscribe application."""

class ChunkScribeError(Exception):
    """Base class for exceptions in this package."""
    pass

class ConfigurationError(ChunkScribeError):
    """Exception raised for invalid configuration values or unreadable config files."""
    pass

class ProbeError(ChunkScribeError):
    """Exception raised when the duration of the input audio cannot be determined."""
    pass

class ExtractionError(ChunkScribeError):
    """Exception raised when a chunk could not be cut from the input audio."""
    pass

class TranscriptionError(ChunkScribeError):
    """Exception raised when the transcription service fails for a chunk."""
    pass

class FileSystemError(ChunkScribeError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
